"""Result objects returned by every adapter operation.

Each result is either successful (``status is Status.OK``) and carries data,
or carries a failure status describing the business outcome.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from transit_adapters.domain.models.departure import StationDepartures
from transit_adapters.domain.models.error_details import ErrorDetails
from transit_adapters.domain.models.location import Location
from transit_adapters.domain.models.query import QueryTripsContext
from transit_adapters.domain.models.trip import PublicLeg, Trip


class Status(Enum):
    """Outcome of an adapter operation."""

    OK = "ok"
    NO_TRIPS = "no_trips"
    TOO_CLOSE = "too_close"
    UNRESOLVABLE_ADDRESS = "unresolvable_address"
    INVALID_DATE = "invalid_date"
    UNKNOWN_LOCATION = "unknown_location"
    INVALID_STATION = "invalid_station"
    NO_JOURNEY = "no_journey"
    SERVICE_DOWN = "service_down"
    SERVICE_UNREACHABLE = "service_unreachable"


class Endpoint(Enum):
    """Trip search endpoint that could not be resolved."""

    FROM = "from"
    VIA = "via"
    TO = "to"


@dataclass(frozen=True)
class ResultHeader:
    """Metadata about the backend that answered."""

    network: str
    server_product: str
    server_version: str | None = None
    server_time: datetime | None = None


@dataclass(frozen=True)
class _Result:
    status: Status = Status.OK
    header: ResultHeader | None = None
    error_details: ErrorDetails | None = None

    @property
    def ok(self) -> bool:
        return self.status is Status.OK


@dataclass(frozen=True)
class SuggestLocationsResult(_Result):
    """Locations matching a free-text constraint, best match first."""

    locations: list[Location] = field(default_factory=list)


@dataclass(frozen=True)
class NearbyLocationsResult(_Result):
    """Locations around a coordinate or station."""

    locations: list[Location] = field(default_factory=list)


@dataclass(frozen=True)
class QueryDeparturesResult(_Result):
    """Departure board, grouped by station."""

    station_departures: list[StationDepartures] = field(default_factory=list)

    def find_station_departures(self, station_id: str) -> StationDepartures | None:
        for station_departures in self.station_departures:
            if station_departures.location.id == station_id:
                return station_departures
        return None


@dataclass(frozen=True)
class QueryTripsResult(_Result):
    """One page of trips, with the context for the next page."""

    trips: list[Trip] = field(default_factory=list)
    context: QueryTripsContext | None = None
    from_location: Location | None = None
    via: Location | None = None
    to: Location | None = None
    unknown_endpoint: Endpoint | None = None


@dataclass(frozen=True)
class QueryJourneyResult(_Result):
    """A single reloaded public leg."""

    journey_leg: PublicLeg | None = None
