"""Decoder for Google encoded polylines (HAFAS ``polyEnc: GPA``)."""

from transit_adapters.domain.models.location import Point

_PRECISION = 1e5


def _read_value(encoded: str, index: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise ValueError("truncated polyline")
        byte = ord(encoded[index]) - 63
        index += 1
        result |= (byte & 0x1F) << shift
        shift += 5
        if byte < 0x20:
            break
    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


def decode_polyline(encoded: str) -> list[Point]:
    """Decode a polyline of delta encoded latitude/longitude pairs.

    Raises:
        ValueError: If the text ends in the middle of a coordinate.
    """
    points: list[Point] = []
    index = 0
    lat = 0
    lon = 0
    while index < len(encoded):
        delta_lat, index = _read_value(encoded, index)
        delta_lon, index = _read_value(encoded, index)
        lat += delta_lat
        lon += delta_lon
        points.append(Point(lat=lat / _PRECISION, lon=lon / _PRECISION))
    return points
