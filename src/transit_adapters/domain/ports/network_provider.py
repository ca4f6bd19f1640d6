"""Network provider port."""

from collections.abc import Set
from datetime import datetime
from typing import Protocol

from transit_adapters.domain.models.capability import Capability
from transit_adapters.domain.models.location import Location, LocationType
from transit_adapters.domain.models.product import Product
from transit_adapters.domain.models.query import QueryTripsContext, TripOptions
from transit_adapters.domain.models.refs import JourneyRef, TripRef
from transit_adapters.domain.models.results import (
    NearbyLocationsResult,
    QueryDeparturesResult,
    QueryJourneyResult,
    QueryTripsResult,
    SuggestLocationsResult,
)


class NetworkProvider(Protocol):
    """Port for querying one transit backend.

    Operations not listed in ``capabilities`` raise UnsupportedOperationError.
    Every operation returns a result carrying a status; business failures are
    never raised.
    """

    @property
    def network_id(self) -> str:
        """Identifier of the backend, recorded in issued references."""
        ...

    @property
    def capabilities(self) -> Set[Capability]:
        """Fixed set of supported operations."""
        ...

    def has_capabilities(self, *capabilities: Capability) -> bool:
        """Check whether all given capabilities are supported."""
        ...

    async def suggest_locations(
        self,
        constraint: str,
        types: Set[LocationType] | None = None,
        max_locations: int = 0,
    ) -> SuggestLocationsResult:
        """Suggest locations matching a free-text constraint."""
        ...

    async def query_nearby_locations(
        self,
        types: Set[LocationType],
        location: Location,
        max_distance: int = 0,
        max_locations: int = 0,
        equivs: bool = False,
        products: Set[Product] | None = None,
    ) -> NearbyLocationsResult:
        """Find locations around a coordinate."""
        ...

    async def query_departures(
        self,
        station_id: str,
        time: datetime | None = None,
        max_departures: int = 0,
        equivs: bool = False,
    ) -> QueryDeparturesResult:
        """Get the departure board of a station."""
        ...

    async def query_trips(
        self,
        from_location: Location,
        via: Location | None,
        to: Location,
        time: datetime,
        departure: bool = True,
        options: TripOptions | None = None,
    ) -> QueryTripsResult:
        """Search trips between two locations."""
        ...

    async def query_more_trips(self, context: QueryTripsContext, later: bool) -> QueryTripsResult:
        """Continue a trip search in one direction."""
        ...

    async def query_reload_trip(self, trip_ref: TripRef) -> QueryTripsResult:
        """Refresh a previously found trip."""
        ...

    async def query_journey(self, journey_ref: JourneyRef) -> QueryJourneyResult:
        """Refresh a single public leg."""
        ...
