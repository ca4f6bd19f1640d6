"""Domain models for transit adapters."""

from transit_adapters.domain.models.capability import Capability
from transit_adapters.domain.models.departure import Departure, StationDepartures
from transit_adapters.domain.models.error_details import ErrorDetails
from transit_adapters.domain.models.fare import Fare, FareType
from transit_adapters.domain.models.line import Line, LineAttribute, Shape, Style
from transit_adapters.domain.models.location import Location, LocationType, Point
from transit_adapters.domain.models.product import Product
from transit_adapters.domain.models.query import (
    QueryTripsContext,
    TripOptions,
    TripQuery,
    WalkSpeed,
)
from transit_adapters.domain.models.refs import JourneyRef, TripRef
from transit_adapters.domain.models.results import (
    Endpoint,
    NearbyLocationsResult,
    QueryDeparturesResult,
    QueryJourneyResult,
    QueryTripsResult,
    ResultHeader,
    Status,
    SuggestLocationsResult,
)
from transit_adapters.domain.models.stop import Position, Stop
from transit_adapters.domain.models.trip import IndividualLeg, IndividualType, PublicLeg, Trip

__all__ = [
    "Capability",
    "Departure",
    "Endpoint",
    "ErrorDetails",
    "Fare",
    "FareType",
    "IndividualLeg",
    "IndividualType",
    "JourneyRef",
    "Line",
    "LineAttribute",
    "Location",
    "LocationType",
    "NearbyLocationsResult",
    "Point",
    "Position",
    "Product",
    "PublicLeg",
    "QueryDeparturesResult",
    "QueryJourneyResult",
    "QueryTripsContext",
    "QueryTripsResult",
    "ResultHeader",
    "Shape",
    "StationDepartures",
    "Status",
    "Stop",
    "Style",
    "SuggestLocationsResult",
    "Trip",
    "TripOptions",
    "TripQuery",
    "TripRef",
    "WalkSpeed",
]
