"""Opaque reload references."""

from dataclasses import dataclass

from transit_adapters.domain.models.location import Location


@dataclass(frozen=True)
class TripRef:
    """Token for reloading a previously found trip.

    Meaningful only to the backend (network) that issued it. The endpoints
    and fare flags are kept so the trip can be requested again without the
    original search context.
    """

    network: str
    reload_token: str
    from_location: Location | None = None
    via: Location | None = None
    to: Location | None = None
    fare_flags: frozenset[str] = frozenset()


@dataclass(frozen=True)
class JourneyRef:
    """Token for reloading a single public leg."""

    network: str
    journey_id: str

