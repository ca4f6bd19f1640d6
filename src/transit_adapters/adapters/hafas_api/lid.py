"""HAFAS location identifiers (lids).

A lid is a list of ``key=value`` pairs, each terminated by ``@``, for example
``A=1@O=Frankfurt (Main) Hbf@X=8663785@Y=50107149@L=3000010@``. Known keys:

- ``A``: location type code (1 station, 2 address, 4 POI)
- ``O``: display name
- ``X``/``Y``: longitude/latitude in micro degrees
- ``L``: backend native id
- ``U``: source code
"""

from dataclasses import dataclass, field

from transit_adapters.domain.models.location import Point

LID_SEPARATOR = "@"
UNIFIED_KEYS = frozenset({"A", "O", "X", "Y", "U", "L"})


def _split_pieces(text: str, separator: str) -> list[str]:
    """Split, dropping trailing empty pieces."""
    pieces = text.split(separator)
    while pieces and not pieces[-1]:
        pieces.pop()
    return pieces


def unify_lid(lid: str | None) -> str | None:
    """Reduce a lid to its stable keys, so equal locations get equal ids.

    Volatile keys (timestamps, backend specific extras) are dropped. Pieces
    that are not ``key=value`` are kept as they are.
    """
    if lid is None:
        return None
    pieces = _split_pieces(lid, LID_SEPARATOR)
    if not pieces:
        return lid
    kept = []
    for piece in pieces:
        name_and_value = _split_pieces(piece, "=")
        if len(name_and_value) != 2 or name_and_value[0] in UNIFIED_KEYS:
            kept.append(piece + LID_SEPARATOR)
    return "".join(kept)


def normalize_station_id(station_id: str | None) -> str | None:
    """Strip leading zero characters, nothing else.

    Idempotent: normalizing twice gives the same result as once.
    """
    if station_id is None:
        return None
    return station_id.lstrip("0")


@dataclass(frozen=True)
class Lid:
    """Parsed form of a lid."""

    type_code: str | None = None
    name: str | None = None
    coord: Point | None = None
    native_id: str | None = None
    source: str | None = None
    extra: tuple[tuple[str, str], ...] = field(default=())

    @classmethod
    def parse(cls, lid: str) -> "Lid":
        """Parse a lid string.

        Raises:
            ValueError: If a piece is not of the form ``key=value``.
        """
        values: dict[str, str] = {}
        extra: list[tuple[str, str]] = []
        for piece in _split_pieces(lid, LID_SEPARATOR):
            key, sep, value = piece.partition("=")
            if not sep or not key:
                raise ValueError(f"malformed lid piece: {piece!r}")
            if key in UNIFIED_KEYS:
                values[key] = value
            else:
                extra.append((key, value))

        coord = None
        if "X" in values and "Y" in values:
            coord = Point.from_e6(int(values["Y"]), int(values["X"]))

        return cls(
            type_code=values.get("A"),
            name=values.get("O"),
            coord=coord,
            native_id=values.get("L"),
            source=values.get("U"),
            extra=tuple(extra),
        )

    def build(self) -> str:
        pieces = []
        if self.type_code is not None:
            pieces.append(("A", self.type_code))
        if self.name is not None:
            pieces.append(("O", self.name))
        if self.coord is not None:
            pieces.append(("X", str(self.coord.lon_e6)))
            pieces.append(("Y", str(self.coord.lat_e6)))
        if self.source is not None:
            pieces.append(("U", self.source))
        if self.native_id is not None:
            pieces.append(("L", self.native_id))
        pieces.extend(self.extra)
        return "".join(f"{key}={value}{LID_SEPARATOR}" for key, value in pieces)
