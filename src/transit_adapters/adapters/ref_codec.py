"""Persistence format for reload references.

A reference is stored as a MessagePack array:

    [FORMAT_VERSION, kind, network, ...]

where kind is ``"T"`` (trip: reload token, from, via, to, fare flags) or
``"J"`` (journey: journey id). Locations are nested arrays. Encoding is
deterministic, so re-encoding a decoded reference yields identical bytes.
"""

from typing import Any

import msgpack
from msgpack.exceptions import UnpackException

from transit_adapters.domain.exceptions import RefDecodeError
from transit_adapters.domain.models.location import Location, LocationType, Point
from transit_adapters.domain.models.product import Product
from transit_adapters.domain.models.refs import JourneyRef, TripRef

FORMAT_VERSION = 1
KIND_TRIP = "T"
KIND_JOURNEY = "J"

_LOCATION_FIELDS = 7


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require_str(value: Any, field: str, optional: bool = False) -> str | None:
    if value is None and optional:
        return None
    if not isinstance(value, str):
        raise RefDecodeError(f"{field} must be a string, got {type(value).__name__}")
    return value


def _require_e6(value: Any, field: str) -> int | None:
    if value is None:
        return None
    if not _is_int(value):
        raise RefDecodeError(f"{field} must be an integer, got {type(value).__name__}")
    return value


def _pack_location(location: Location | None) -> list[Any] | None:
    if location is None:
        return None
    coord = location.coord
    products = Product.to_codes(location.products) if location.products is not None else None
    return [
        location.type.value,
        location.id,
        coord.lat_e6 if coord else None,
        coord.lon_e6 if coord else None,
        location.place,
        location.name,
        products,
    ]


def _unpack_location(value: Any, field: str) -> Location | None:
    if value is None:
        return None
    if not isinstance(value, list) or len(value) != _LOCATION_FIELDS:
        raise RefDecodeError(f"{field} is not a packed location")
    type_code, location_id, lat_e6, lon_e6, place, name, products = value
    lat_e6 = _require_e6(lat_e6, f"{field} latitude")
    lon_e6 = _require_e6(lon_e6, f"{field} longitude")
    products = _require_str(products, f"{field} products", optional=True)
    coord = Point.from_e6(lat_e6, lon_e6) if lat_e6 is not None and lon_e6 is not None else None
    return Location(
        type=LocationType(_require_str(type_code, f"{field} type")),
        id=_require_str(location_id, f"{field} id", optional=True),
        coord=coord,
        place=_require_str(place, f"{field} place", optional=True),
        name=_require_str(name, f"{field} name", optional=True),
        products=Product.from_codes(products) if products is not None else None,
    )


def _unpack_fare_flags(value: Any) -> frozenset[str]:
    if not isinstance(value, list):
        raise RefDecodeError(f"fare flags must be an array, got {type(value).__name__}")
    return frozenset(_require_str(flag, "fare flag") for flag in value)


def encode_ref(ref: TripRef | JourneyRef) -> bytes:
    """Pack a trip or journey reference."""
    if isinstance(ref, TripRef):
        payload: list[Any] = [
            FORMAT_VERSION,
            KIND_TRIP,
            ref.network,
            ref.reload_token,
            _pack_location(ref.from_location),
            _pack_location(ref.via),
            _pack_location(ref.to),
            sorted(ref.fare_flags),
        ]
    else:
        payload = [FORMAT_VERSION, KIND_JOURNEY, ref.network, ref.journey_id]
    return msgpack.packb(payload, use_bin_type=True)


def decode_ref(data: bytes, expected_network: str | None = None) -> TripRef | JourneyRef:
    """Unpack a reference, optionally checking which backend issued it.

    Raises:
        RefDecodeError: If the data is malformed, of an unknown version or
            kind, or was issued by another network.
    """
    try:
        payload = msgpack.unpackb(data, raw=False, strict_map_key=True)
    except (ValueError, TypeError, UnpackException) as e:
        raise RefDecodeError(f"cannot unpack reference: {e}") from e

    if not isinstance(payload, list) or len(payload) < 3:
        raise RefDecodeError("reference is not a versioned array")
    version, kind, network = payload[:3]
    if not _is_int(version) or version != FORMAT_VERSION:
        raise RefDecodeError(f"unsupported reference format version: {version!r}")
    network = _require_str(network, "network")
    if expected_network is not None and network != expected_network:
        raise RefDecodeError(f"reference belongs to network {network}, not {expected_network}")

    try:
        if kind == KIND_TRIP:
            reload_token, from_location, via, to, fare_flags = payload[3:]
            return TripRef(
                network=network,
                reload_token=_require_str(reload_token, "reload token"),
                from_location=_unpack_location(from_location, "from"),
                via=_unpack_location(via, "via"),
                to=_unpack_location(to, "to"),
                fare_flags=_unpack_fare_flags(fare_flags),
            )
        if kind == KIND_JOURNEY:
            (journey_id,) = payload[3:]
            return JourneyRef(network=network, journey_id=_require_str(journey_id, "journey id"))
    except (ValueError, TypeError) as e:
        raise RefDecodeError(f"malformed {kind} reference: {e}") from e
    raise RefDecodeError(f"unknown reference kind: {kind!r}")
