"""VAO (Verkehrsauskunft Österreich) and SVV (Salzburger Verkehrsverbund) profiles."""

from dataclasses import replace
from types import MappingProxyType

from transit_adapters.adapters.hafas_api.name_splitting import PlaceFirstNameSplitter
from transit_adapters.adapters.hafas_api.products import ProductsMap
from transit_adapters.adapters.hafas_api.profile import HafasProfile
from transit_adapters.domain.models.line import BLACK, Style
from transit_adapters.domain.models.product import Product

VAO_PRODUCTS_MAP = ProductsMap(
    [
        Product.HIGH_SPEED_TRAIN,
        Product.SUBURBAN_TRAIN,
        Product.SUBWAY,
        None,
        Product.TRAM,
        Product.REGIONAL_TRAIN,
        Product.BUS,
        Product.BUS,
        Product.TRAM,
        Product.FERRY,
        Product.ON_DEMAND,
        Product.BUS,
        Product.REGIONAL_TRAIN,
        None,
        None,
        None,
    ]
)

_SALZBURG_LINES = {
    "SS1": "#b61d33",
    "SS2": "#0069b4",
    "SS3": "#0aa537",
    "SS4": "#a862a4",
    "SS11": "#b61d33",
    "B1": "#e3000f",
    "B2": "#0069b4",
    "B3": "#956b27",
    "B4": "#ffcc00",
    "B5": "#04bbee",
    "B6": "#85bc22",
    "B7": "#009a9b",
    "B8": "#f39100",
    "B12": "#b9dfde",
    "B14": "#cfe09a",
}


def _salzburg_styles(operator_for_line: dict[str, str]) -> dict[str, Style]:
    styles = {
        f"{operator_for_line.get(line, operator_for_line['*'])}|{line}": Style.of(color, "#ffffff")
        for line, color in _SALZBURG_LINES.items()
    }
    b10_key = f"{operator_for_line.get('B10', operator_for_line['*'])}|B10"
    styles[b10_key] = Style(Style.of("#f8baa2").background_color, BLACK)
    return styles


VAO_STYLES = MappingProxyType(
    _salzburg_styles(
        {"*": "Salzburg AG", "SS2": "OEBB", "SS3": "OEBB", "SS4": "BLB"},
    )
)

SVV_STYLES = MappingProxyType({**VAO_STYLES, **_salzburg_styles({"*": "svv"})})

VAO_PROFILE = HafasProfile(
    network="vao",
    api_base="https://app.verkehrsauskunft.at/hamm/",
    api_endpoint="gate",
    api_version="1.59",
    api_ext="VAO.22",
    api_client={"id": "VAO", "l": "vs_vao", "type": "AND"},
    api_authorization="https://app.verkehrsauskunft.at/webapp/config/webapp.config.json",
    products_map=VAO_PRODUCTS_MAP,
    styles=VAO_STYLES,
    timezone="Europe/Vienna",
    name_splitter=PlaceFirstNameSplitter(require_lowercase_second_char=True, poi_name_first=True),
)

SVV_PROFILE = replace(
    VAO_PROFILE,
    network="svv",
    api_base="https://fahrplan.salzburg-verkehr.at/hamm/",
    api_client={"id": "VAO", "type": "WEB", "name": "webapp", "l": "vs_svv"},
    api_authorization="https://fahrplan.salzburg-verkehr.at/webapp/config/webapp.config.json",
    styles=SVV_STYLES,
)
