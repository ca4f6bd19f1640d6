"""RMV (Rhein-Main-Verkehrsverbund) profile."""

from types import MappingProxyType

from transit_adapters.adapters.hafas_api.name_splitting import PlaceFirstNameSplitter
from transit_adapters.adapters.hafas_api.products import ProductsMap
from transit_adapters.adapters.hafas_api.profile import HafasProfile
from transit_adapters.domain.models.line import RED, Shape, Style
from transit_adapters.domain.models.line_styles import DEFAULT_STYLES
from transit_adapters.domain.models.product import Product

RMV_PRODUCTS_MAP = ProductsMap(
    [
        Product.HIGH_SPEED_TRAIN,
        Product.HIGH_SPEED_TRAIN,
        Product.REGIONAL_TRAIN,
        Product.SUBURBAN_TRAIN,
        Product.SUBWAY,
        Product.TRAM,
        Product.BUS,
        Product.BUS,
        Product.FERRY,
        Product.ON_DEMAND,
        Product.SUBURBAN_TRAIN,
    ]
)


def _rounded(product: Product) -> Style:
    default = DEFAULT_STYLES[product]
    return Style(
        default.background_color, default.foreground_color, Shape.ROUNDED, default.border_color
    )


RMV_STYLES = MappingProxyType(
    {
        "I": Style(
            DEFAULT_STYLES[Product.HIGH_SPEED_TRAIN].background_color, RED, Shape.ROUNDED, RED
        ),
        "R": _rounded(Product.REGIONAL_TRAIN),
        "S": _rounded(Product.SUBURBAN_TRAIN),
        "U": _rounded(Product.SUBWAY),
        "T": _rounded(Product.TRAM),
        "B": DEFAULT_STYLES[Product.BUS],
        "P": DEFAULT_STYLES[Product.ON_DEMAND],
        "F": _rounded(Product.FERRY),
        "E": DEFAULT_STYLES[Product.REPLACEMENT_SERVICE],
    }
)

# Places containing spaces; other places are a single word, optionally
# prefixed by "Bad " and suffixed by a parenthesized qualifier.
RMV_SPECIAL_PLACES = (
    "Groß Gerau",
    "Bad Soden-Salmünster-Bad Soden",
    "Hofheim am Taunus",
    "Bad Homburg v.d.H.",
)

RMV_PROFILE = HafasProfile(
    network="rmv",
    api_base="https://www.rmv.de/auskunft/bin/jp/",
    api_version="1.79",
    api_client={"id": "RMV", "type": "WEB", "name": "webapp", "l": "vs_webapp"},
    api_authorization="https://www.rmv.de/auskunft/rmv/app/config/webapp.config.json",
    products_map=RMV_PRODUCTS_MAP,
    styles=RMV_STYLES,
    timezone="Europe/Berlin",
    additional_journey_filters=({"value": "GROUP_PT", "mode": "INC", "type": "GROUP"},),
    name_splitter=PlaceFirstNameSplitter(special_places=RMV_SPECIAL_PLACES),
)
