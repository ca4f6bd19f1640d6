"""Departure board domain models."""

from dataclasses import dataclass, field
from datetime import datetime

from transit_adapters.domain.models.line import Line
from transit_adapters.domain.models.location import Location
from transit_adapters.domain.models.refs import JourneyRef
from transit_adapters.domain.models.stop import Position


@dataclass(frozen=True)
class Departure:
    """Represents a single departure from a station."""

    planned_time: datetime | None
    predicted_time: datetime | None
    line: Line
    planned_position: Position | None
    predicted_position: Position | None
    destination: Location | None
    cancelled: bool = False
    message: str | None = None
    journey_ref: JourneyRef | None = None

    @property
    def time(self) -> datetime | None:
        return self.predicted_time or self.planned_time

    @property
    def position(self) -> Position | None:
        return self.predicted_position or self.planned_position


@dataclass(frozen=True)
class StationDepartures:
    """Departures grouped by the station they leave from."""

    location: Location
    departures: list[Departure] = field(default_factory=list)
