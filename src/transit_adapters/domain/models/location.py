"""Location domain model."""

from dataclasses import dataclass
from enum import Enum

from transit_adapters.domain.models.product import Product


class LocationType(Enum):
    """Kind of a location."""

    STATION = "S"
    ADDRESS = "A"
    POI = "P"
    ANY = "X"


@dataclass(frozen=True)
class Point:
    """A WGS84 coordinate in degrees."""

    lat: float
    lon: float

    @classmethod
    def from_e6(cls, lat_e6: int, lon_e6: int) -> "Point":
        return cls(lat=lat_e6 / 1e6, lon=lon_e6 / 1e6)

    @property
    def lat_e6(self) -> int:
        return round(self.lat * 1e6)

    @property
    def lon_e6(self) -> int:
        return round(self.lon * 1e6)


@dataclass(frozen=True)
class Location:
    """A station, address, point of interest or bare coordinate.

    Stations should carry a backend-stable id. Addresses, POIs and ANY
    locations may be described by coordinate alone.
    """

    type: LocationType
    id: str | None = None
    coord: Point | None = None
    place: str | None = None
    name: str | None = None
    products: frozenset[Product] | None = None

    def __post_init__(self) -> None:
        if self.place is not None and self.name is None:
            raise ValueError(f"place without name cannot exist: {self.place}")

    @classmethod
    def station(cls, station_id: str) -> "Location":
        return cls(type=LocationType.STATION, id=station_id)

    @classmethod
    def coordinate(cls, coord: Point) -> "Location":
        return cls(type=LocationType.ANY, coord=coord)

    @property
    def has_id(self) -> bool:
        return bool(self.id)

    @property
    def has_name(self) -> bool:
        return self.name is not None

    @property
    def has_coord(self) -> bool:
        return self.coord is not None

    @property
    def is_identified(self) -> bool:
        """Whether the location can be used directly in a query."""
        if self.type is LocationType.STATION:
            return self.has_id
        if self.type in (LocationType.ADDRESS, LocationType.POI):
            return self.has_id or self.has_coord
        return self.has_coord

    def unique_short_name(self) -> str | None:
        if self.place and self.name:
            return f"{self.name}, {self.place}"
        return self.name if self.name is not None else self.id

    def display_name(self) -> str | None:
        """Place and name joined by a space, as a user would type it."""
        if self.name is None:
            return None
        if self.place:
            return f"{self.place} {self.name}"
        return self.name
