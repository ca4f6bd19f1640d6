"""Trip and leg domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from transit_adapters.domain.models.fare import Fare
from transit_adapters.domain.models.line import Line
from transit_adapters.domain.models.location import Location, Point
from transit_adapters.domain.models.product import Product
from transit_adapters.domain.models.refs import JourneyRef, TripRef
from transit_adapters.domain.models.stop import Stop


class IndividualType(Enum):
    """Kind of a non-transit leg."""

    WALK = "walk"
    TRANSFER = "transfer"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


@dataclass(frozen=True)
class PublicLeg:
    """A ride on a transit line."""

    line: Line
    destination: Location | None
    departure_stop: Stop
    arrival_stop: Stop
    intermediate_stops: list[Stop] | None = None
    path: list[Point] | None = None
    message: str | None = None
    journey_ref: JourneyRef | None = None

    @property
    def departure(self) -> Location:
        return self.departure_stop.location

    @property
    def arrival(self) -> Location:
        return self.arrival_stop.location

    @property
    def departure_time(self) -> datetime | None:
        return self.departure_stop.departure_time

    @property
    def arrival_time(self) -> datetime | None:
        return self.arrival_stop.arrival_time


@dataclass(frozen=True)
class IndividualLeg:
    """A walk, transfer or check-in/out between two locations."""

    type: IndividualType
    departure: Location
    departure_time: datetime
    arrival: Location
    arrival_time: datetime
    distance: int = 0
    path: list[Point] | None = None

    @property
    def minutes(self) -> int:
        return int((self.arrival_time - self.departure_time).total_seconds() // 60)


Leg = PublicLeg | IndividualLeg


@dataclass(frozen=True)
class Trip:
    """An itinerary made of one or more legs."""

    id: str | None
    from_location: Location
    to: Location
    legs: list[Leg]
    trip_ref: TripRef | None = None
    fares: list[Fare] = field(default_factory=list)
    capacity: tuple[int, int] | None = None
    changes: int | None = None

    def __post_init__(self) -> None:
        if not self.legs:
            raise ValueError("a trip needs at least one leg")

    @property
    def trip_id(self) -> str:
        """Backend id, or a substitute built from the legs."""
        return self.id if self.id is not None else self._build_substitute_id()

    @property
    def first_departure_time(self) -> datetime | None:
        return self.legs[0].departure_time

    @property
    def last_arrival_time(self) -> datetime | None:
        return self.legs[-1].arrival_time

    @property
    def public_legs(self) -> list[PublicLeg]:
        return [leg for leg in self.legs if isinstance(leg, PublicLeg)]

    @property
    def num_changes(self) -> int | None:
        """Changes between public legs; None when the trip has no public leg."""
        if self.changes is not None:
            return self.changes
        public_legs = self.public_legs
        return len(public_legs) - 1 if public_legs else None

    @property
    def products(self) -> frozenset[Product]:
        return frozenset(leg.line.product for leg in self.public_legs if leg.line.product)

    def is_travelable(self) -> bool:
        """False if legs overlap in time or a boarding/alighting is cancelled."""
        time: datetime | None = None
        for leg in self.legs:
            if isinstance(leg, PublicLeg) and (
                leg.departure_stop.departure_cancelled or leg.arrival_stop.arrival_cancelled
            ):
                return False
            for leg_time in (leg.departure_time, leg.arrival_time):
                if leg_time is None:
                    continue
                if time is not None and leg_time < time:
                    return False
                time = leg_time
        return True

    def _build_substitute_id(self) -> str:
        parts = []
        for leg in self.legs:
            piece = f"{_location_key(leg.departure)}-{_location_key(leg.arrival)}-"
            if isinstance(leg, IndividualLeg):
                piece += "individual"
            else:
                planned_departure = leg.departure_stop.planned_departure_time
                if planned_departure is not None:
                    piece += f"{int(planned_departure.timestamp() * 1000)}-"
                planned_arrival = leg.arrival_stop.planned_arrival_time
                if planned_arrival is not None:
                    piece += f"{int(planned_arrival.timestamp() * 1000)}-"
                piece += f"{leg.line.product_code or ''}{leg.line.label or ''}"
            parts.append(piece)
        return "|".join(parts)


def _location_key(location: Location) -> str:
    if location.has_id:
        return str(location.id)
    if location.coord is not None:
        return f"{location.coord.lat},{location.coord.lon}"
    return ""
