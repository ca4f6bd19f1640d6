"""Stop and platform position domain models."""

import re
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from transit_adapters.domain.models.location import Location

_P_POSITION_SECTION = re.compile(r"(\d{1,5})\s*([A-Z](?:\s*-?\s*[A-Z])?)?")
_P_POSITION_DIRECTION = re.compile(r"(\d{1,5})\s*(Nord|Süd|Ost|West)")


@dataclass(frozen=True)
class Position:
    """A platform, optionally narrowed down to a section."""

    name: str
    section: str | None = None
    same_platform: bool = False

    def with_same_platform(self) -> "Position":
        return replace(self, same_platform=True)

    def __str__(self) -> str:
        return f"{self.name}{self.section}" if self.section else self.name


def parse_position(text: str | None) -> Position | None:
    """Parse platform text like '12 A-C' into a position."""
    if text is None:
        return None

    match = _P_POSITION_SECTION.fullmatch(text)
    if match:
        name = str(int(match.group(1)))
        section = match.group(2)
        if section is not None:
            section = re.sub(r"\s+", "", section)
        return Position(name, section)

    match = _P_POSITION_DIRECTION.fullmatch(text)
    if match:
        return Position(str(int(match.group(1))), match.group(2)[0])

    return Position(text)


@dataclass(frozen=True)
class Stop:
    """A call at a location with planned and predicted times and positions."""

    location: Location
    planned_arrival_time: datetime | None = None
    predicted_arrival_time: datetime | None = None
    planned_arrival_position: Position | None = None
    predicted_arrival_position: Position | None = None
    arrival_cancelled: bool = False
    planned_departure_time: datetime | None = None
    predicted_departure_time: datetime | None = None
    planned_departure_position: Position | None = None
    predicted_departure_position: Position | None = None
    departure_cancelled: bool = False

    @property
    def arrival_time(self) -> datetime | None:
        return self.predicted_arrival_time or self.planned_arrival_time

    @property
    def departure_time(self) -> datetime | None:
        return self.predicted_departure_time or self.planned_departure_time

    @property
    def arrival_position(self) -> Position | None:
        return self.predicted_arrival_position or self.planned_arrival_position

    @property
    def departure_position(self) -> Position | None:
        return self.predicted_departure_position or self.planned_departure_position

    @property
    def arrival_delay(self) -> timedelta | None:
        if self.planned_arrival_time and self.predicted_arrival_time:
            return self.predicted_arrival_time - self.planned_arrival_time
        return None

    @property
    def departure_delay(self) -> timedelta | None:
        if self.planned_departure_time and self.predicted_departure_time:
            return self.predicted_departure_time - self.planned_departure_time
        return None
