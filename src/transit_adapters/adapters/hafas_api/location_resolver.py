"""Resolution of trip search endpoints to backend-addressable locations."""

import logging
from collections.abc import Awaitable, Callable

from transit_adapters.adapters.hafas_api.lid import normalize_station_id
from transit_adapters.domain.models.location import Location, LocationType, Point

logger = logging.getLogger(__name__)

NameLookup = Callable[[str, int], Awaitable[list[Location]]]
CoordinateLookup = Callable[[Point, int], Awaitable[list[Location]]]


class LocationResolver:
    """Turns a partially described location into one the backend can address.

    Tries, in order: the location's own id, a name search on "place name",
    then the closest location to its coordinate. Each lookup asks for a
    single result and takes the first one.
    """

    def __init__(self, match_name: NameLookup, match_coordinate: CoordinateLookup) -> None:
        self._match_name = match_name
        self._match_coordinate = match_coordinate

    async def resolve(self, location: Location) -> Location | None:
        """Resolved location, or None if it cannot be identified."""
        if location.has_id:
            if location.type is LocationType.STATION and normalize_station_id(location.id) == "":
                logger.info(f"Station id '{location.id}' is empty after normalization")
                return None
            return location

        query = location.display_name()
        if query:
            found = await self._match_name(query, 1)
            if found:
                return found[0]
            logger.debug(f"No location matches name '{query}'")

        if location.coord is not None:
            found = await self._match_coordinate(location.coord, 1)
            if found:
                return found[0]
            logger.debug(f"No location near {location.coord}")

        return None
