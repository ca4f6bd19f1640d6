"""BVG (Berliner Verkehrsbetriebe) profile.

Based on hafas-client JavaScript implementation:
https://github.com/public-transport/hafas-client/tree/main/p/bvg

BVG and VBB share the same mgate endpoint; requests are signed with a
checksum salt.
"""

from types import MappingProxyType

from transit_adapters.adapters.hafas_api.products import ProductsMap
from transit_adapters.adapters.hafas_api.profile import HafasProfile
from transit_adapters.adapters.hafas_api.signing import Salt
from transit_adapters.domain.models.line import Style
from transit_adapters.domain.models.product import Product

BVG_PRODUCTS_MAP = ProductsMap(
    [
        Product.SUBURBAN_TRAIN,  # 1 S-Bahn
        Product.SUBWAY,  # 2 U-Bahn
        Product.TRAM,  # 4 Tram
        Product.BUS,  # 8 Bus
        Product.FERRY,  # 16 Ferry
        Product.REGIONAL_TRAIN,  # 32 Regional
        Product.REGIONAL_TRAIN,  # 64 Regional express
        Product.HIGH_SPEED_TRAIN,  # 128 IC/EC
        Product.HIGH_SPEED_TRAIN,  # 256 ICE
    ]
)

BVG_STYLES = MappingProxyType(
    {
        "S": Style.of("#008d4f"),
        "U": Style.of("#115d91"),
        "T": Style.of("#cc0a22"),
        "B": Style.of("#a5027d"),
        "BN": Style.of("#000000"),
    }
)

BVG_PROFILE = HafasProfile(
    network="bvg",
    api_base="https://fahrinfo.vbb.de/bin/",
    api_version="1.15",
    api_client={"id": "VBB", "v": "3000000", "type": "IPH", "name": "VBB"},
    api_ext="VBB.R21.12.a",
    api_authorization='{"type":"AID","aid":"n91dB8Z77MLdoR0K"}',
    products_map=BVG_PRODUCTS_MAP,
    checksum_salt=Salt(raw=b"7x8i3q2m5N9wV4vR"),
    styles=BVG_STYLES,
    timezone="Europe/Berlin",
    user_agent="VBB/3.0.0 (iPhone; iOS 13.1.2; Scale/2.00)",
)
