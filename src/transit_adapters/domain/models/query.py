"""Trip search query and pagination context."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from transit_adapters.domain.models.location import Location
from transit_adapters.domain.models.product import Product


class WalkSpeed(Enum):
    """Walking speed hint for footpaths."""

    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"


@dataclass(frozen=True)
class TripOptions:
    """Optional trip search parameters."""

    products: frozenset[Product] | None = None
    walk_speed: WalkSpeed = WalkSpeed.NORMAL


@dataclass(frozen=True)
class TripQuery:
    """Parameters of a trip search, after endpoint resolution."""

    from_location: Location
    via: Location | None
    to: Location
    time: datetime
    departure: bool = True
    options: TripOptions = field(default_factory=TripOptions)


@dataclass(frozen=True)
class QueryTripsContext:
    """Pagination handle returned with every trip search page.

    Callers only ask whether continuation is possible. The query and the
    backend cursors inside are for the adapter that issued the context.
    Each page yields a new context; cursors are never accumulated.
    """

    network: str
    query: TripQuery
    later_cursor: str | None = None
    earlier_cursor: str | None = None

    def can_query_later(self) -> bool:
        return bool(self.later_cursor)

    def can_query_earlier(self) -> bool:
        return bool(self.earlier_cursor)
