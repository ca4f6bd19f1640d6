"""Line and line style domain models."""

from dataclasses import dataclass
from enum import Enum

from transit_adapters.domain.models.product import Product

BLACK = 0xFF000000
WHITE = 0xFFFFFFFF
RED = 0xFFFF0000
DKGRAY = 0xFF444444
TRANSPARENT = 0x00000000


def argb(alpha: int, red: int, green: int, blue: int) -> int:
    """Pack color channels (0-255 each) into a 32 bit ARGB integer."""
    return ((alpha & 0xFF) << 24) | ((red & 0xFF) << 16) | ((green & 0xFF) << 8) | (blue & 0xFF)


def rgb(red: int, green: int, blue: int) -> int:
    return argb(0xFF, red, green, blue)


def parse_color(color: str) -> int:
    """Parse '#rrggbb' or '#aarrggbb' into an ARGB integer.

    Raises:
        ValueError: If the text is not a hex color.
    """
    if not color.startswith("#") or len(color) not in (7, 9):
        raise ValueError(f"Unknown color: {color}")
    value = int(color[1:], 16)
    if len(color) == 7:
        value |= 0xFF000000
    return value


def derive_foreground_color(background_color: int) -> int:
    """Pick black or white text for a background, by perceived brightness."""
    red = (background_color >> 16) & 0xFF
    green = (background_color >> 8) & 0xFF
    blue = background_color & 0xFF
    brightness = (red * 299 + green * 587 + blue * 114) / 1000
    return BLACK if brightness >= 128 else WHITE


class Shape(Enum):
    """Shape of a line badge."""

    RECT = "rect"
    ROUNDED = "rounded"
    CIRCLE = "circle"


@dataclass(frozen=True)
class Style:
    """Visual appearance of a line badge, colors as ARGB integers."""

    background_color: int
    foreground_color: int
    shape: Shape = Shape.ROUNDED
    border_color: int = TRANSPARENT

    @classmethod
    def of(
        cls,
        background: str,
        foreground: str | None = None,
        shape: Shape = Shape.ROUNDED,
        border: str | None = None,
    ) -> "Style":
        """Build a style from hex color strings, deriving the foreground if omitted."""
        background_color = parse_color(background)
        foreground_color = (
            parse_color(foreground)
            if foreground is not None
            else derive_foreground_color(background_color)
        )
        border_color = parse_color(border) if border is not None else TRANSPARENT
        return cls(background_color, foreground_color, shape, border_color)

    @property
    def has_border(self) -> bool:
        return self.border_color != TRANSPARENT


class LineAttribute(Enum):
    """Accessibility and amenity attributes of a line."""

    WHEELCHAIR = "wheelchair"
    BICYCLE = "bicycle"


@dataclass(frozen=True)
class Line:
    """A transit line as shown to passengers."""

    id: str | None
    operator: str | None
    product: Product | None
    label: str | None
    name: str | None = None
    style: Style | None = None
    attributes: frozenset[LineAttribute] = frozenset()
    message: str | None = None

    @property
    def product_code(self) -> str | None:
        return self.product.code if self.product else None

    def has_attribute(self, attribute: LineAttribute) -> bool:
        return attribute in self.attributes
