"""Shared fixtures: a small HAFAS profile and canned HCI response pages."""

import json
from collections.abc import Callable
from dataclasses import replace
from typing import Any

import pytest

from transit_adapters.adapters.hafas_api.products import ProductsMap
from transit_adapters.adapters.hafas_api.profile import HafasProfile
from transit_adapters.adapters.hafas_api.signing import Salt
from transit_adapters.domain.models.line import Style
from transit_adapters.domain.models.product import Product

TEST_PRODUCTS_MAP = ProductsMap(
    [
        Product.SUBURBAN_TRAIN,  # 1
        Product.SUBWAY,  # 2
        Product.TRAM,  # 4
        Product.BUS,  # 8
        Product.FERRY,  # 16
        Product.REGIONAL_TRAIN,  # 32
        None,  # 64 unmapped
        Product.HIGH_SPEED_TRAIN,  # 128
    ]
)

PageBuilder = Callable[..., str]


@pytest.fixture
def test_profile() -> HafasProfile:
    """Profile of a pre-lid backend (1.15) with inline auth and a checksum salt."""
    return HafasProfile(
        network="test",
        api_base="https://hafas.example.com/bin/",
        api_version="1.15",
        api_client={"id": "TEST", "type": "IPH", "name": "test"},
        products_map=TEST_PRODUCTS_MAP,
        api_authorization='{"type":"AID","aid":"secret-aid"}',
        checksum_salt=Salt(raw=b"test-salt"),
        styles={"B": Style.of("#a5027d")},
    )


@pytest.fixture
def lid_profile(test_profile: HafasProfile) -> HafasProfile:
    """Same backend, speaking 1.59 where locations are addressed by lid."""
    return replace(test_profile, api_version="1.59", checksum_salt=None)


@pytest.fixture
def hci_page() -> PageBuilder:
    """Factory for a response envelope holding ServerInfo plus one method result."""

    def build(
        method: str,
        res: dict[str, Any] | None = None,
        err: str = "OK",
        err_txt: str | None = None,
    ) -> str:
        service: dict[str, Any] = {"meth": method, "err": err}
        if err_txt is not None:
            service["errTxt"] = err_txt
        if res is not None:
            service["res"] = res
        return json.dumps(
            {
                "ver": "1.15",
                "lang": "deu",
                "err": "OK",
                "svcResL": [
                    {"meth": "ServerInfo", "err": "OK", "res": {"sD": "20240315", "sT": "101500"}},
                    service,
                ],
            }
        )

    return build
