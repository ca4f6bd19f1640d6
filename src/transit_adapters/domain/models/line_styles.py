"""Line style resolution.

Styles are looked up in an immutable map keyed by ``network|<code><label>``,
``network|<code>``, ``<code><label>`` or ``<code>``. ``BN`` keys style night
buses (bus lines whose label starts with ``N``).
"""

from collections.abc import Mapping
from types import MappingProxyType

from transit_adapters.domain.models.line import DKGRAY, RED, WHITE, Shape, Style, parse_color
from transit_adapters.domain.models.product import Product

STYLES_SEPARATOR = "|"

DEFAULT_STYLES: Mapping[Product | None, Style] = MappingProxyType(
    {
        Product.HIGH_SPEED_TRAIN: Style(parse_color("#ffffff"), RED, Shape.RECT, RED),
        Product.REGIONAL_TRAIN: Style(parse_color("#808080"), WHITE, Shape.RECT),
        Product.SUBURBAN_TRAIN: Style(parse_color("#006e34"), WHITE, Shape.CIRCLE),
        Product.SUBWAY: Style(parse_color("#003090"), WHITE, Shape.RECT),
        Product.TRAM: Style(parse_color("#cc0000"), WHITE, Shape.RECT),
        Product.BUS: Style(parse_color("#993399"), WHITE),
        Product.ON_DEMAND: Style(parse_color("#00695c"), WHITE),
        Product.FERRY: Style(parse_color("#0000ff"), WHITE, Shape.CIRCLE),
        Product.REPLACEMENT_SERVICE: Style(parse_color("#805080"), WHITE),
        None: Style(DKGRAY, WHITE),
    }
)


def _is_night_bus(product: Product, label: str | None) -> bool:
    return product is Product.BUS and label is not None and label.startswith("N")


def special_line_style(
    styles: Mapping[str, Style] | None,
    network: str | None,
    product: Product | None,
    label: str | None,
) -> Style | None:
    """Find a configured style, most specific key first."""
    if not styles or product is None:
        return None

    line_key = f"{product.code}{label or ''}"
    if network is not None:
        prefix = f"{network}{STYLES_SEPARATOR}"
        for key in (prefix + line_key, prefix + product.code):
            if key in styles:
                return styles[key]
        if _is_night_bus(product, label) and f"{prefix}BN" in styles:
            return styles[f"{prefix}BN"]

    for key in (line_key, product.code):
        if key in styles:
            return styles[key]
    if _is_night_bus(product, label) and "BN" in styles:
        return styles["BN"]

    return None


def resolve_line_style(
    styles: Mapping[str, Style] | None,
    network: str | None,
    product: Product | None,
    label: str | None,
    backend_style: Style | None = None,
) -> Style:
    """Resolve the style of a line; first hit wins.

    Configured styles come first, then a style supplied by the backend
    itself (its icon table), then the product default.
    """
    style = special_line_style(styles, network, product, label)
    if style is not None:
        return style
    if backend_style is not None:
        return backend_style
    return DEFAULT_STYLES.get(product, DEFAULT_STYLES[None])
