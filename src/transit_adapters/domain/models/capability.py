"""Capability domain model."""

from enum import Enum


class Capability(Enum):
    """Operations an adapter may support."""

    SUGGEST_LOCATIONS = "suggest_locations"
    NEARBY_LOCATIONS = "query_nearby_locations"
    DEPARTURES = "query_departures"
    TRIPS = "query_trips"
    MORE_TRIPS = "query_more_trips"
    TRIP_RELOAD = "query_reload_trip"
    JOURNEY = "query_journey"

    @property
    def operation(self) -> str:
        """Name of the adapter method guarded by this capability."""
        return self.value
