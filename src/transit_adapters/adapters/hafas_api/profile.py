"""Backend profile for the HAFAS client interface.

A profile is the complete, immutable description of one backend: where it
lives, how requests are authenticated and signed, and how its vocabulary
maps onto the domain model. It is built once and shared by reference.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import pytz

from transit_adapters.adapters.hafas_api.name_splitting import NameSplitter
from transit_adapters.adapters.hafas_api.products import ProductsMap
from transit_adapters.adapters.hafas_api.signing import Salt
from transit_adapters.domain.models.capability import Capability
from transit_adapters.domain.models.line import Style

MIN_API_LEVEL = 14
LID_ONLY_API_LEVEL = 40

DEFAULT_CAPABILITIES = frozenset(
    {
        Capability.SUGGEST_LOCATIONS,
        Capability.NEARBY_LOCATIONS,
        Capability.DEPARTURES,
        Capability.TRIPS,
        Capability.MORE_TRIPS,
        Capability.TRIP_RELOAD,
        Capability.JOURNEY,
    }
)


def parse_api_version(api_version: str) -> int:
    """Validate an API version of the form '1.<minor>' and return the minor.

    Raises:
        ValueError: If the version is malformed or older than 1.14.
    """
    parts = api_version.split(".")
    if len(parts) != 2:
        raise ValueError(f"bad api version: {api_version}")
    if parts[0] != "1":
        raise ValueError("api version major must be 1")
    try:
        minor = int(parts[1])
    except ValueError:
        raise ValueError(f"invalid api version: {api_version}") from None
    if minor < MIN_API_LEVEL:
        raise ValueError(f"api version must be 1.{MIN_API_LEVEL} or higher")
    return minor


@dataclass(frozen=True)
class HafasProfile:
    """Configuration of one HAFAS client interface backend."""

    network: str
    api_base: str
    api_version: str
    api_client: Mapping[str, Any]
    products_map: ProductsMap
    api_endpoint: str = "mgate.exe"
    api_ext: str | None = None
    # Inline JSON object, or URL of a webapp config holding ``hciAuth.aid``.
    api_authorization: str | None = None
    timezone: str = "Europe/Berlin"
    language: str = "de"
    checksum_salt: Salt | None = None
    mic_mac_salt: Salt | None = None
    styles: Mapping[str, Style] = field(default_factory=lambda: MappingProxyType({}))
    capabilities: frozenset[Capability] = DEFAULT_CAPABILITIES
    use_add_name: bool = False
    additional_journey_filters: tuple[Mapping[str, Any], ...] = ()
    name_splitter: NameSplitter = field(default_factory=NameSplitter)
    link_same_platform: bool = False
    user_agent: str | None = None

    def __post_init__(self) -> None:
        parse_api_version(self.api_version)
        if self.language not in ("de", "en"):
            raise ValueError(f"unsupported language: {self.language}")
        pytz.timezone(self.timezone)

    @property
    def api_level(self) -> int:
        return parse_api_version(self.api_version)

    @property
    def use_lid_only(self) -> bool:
        """From 1.40 on locations are addressed by lid alone."""
        return self.api_level >= LID_ONLY_API_LEVEL

    @property
    def tz(self) -> Any:
        return pytz.timezone(self.timezone)

    @property
    def endpoint_url(self) -> str:
        return self.api_base.rstrip("/") + "/" + self.api_endpoint

    @property
    def authorization_is_remote(self) -> bool:
        auth = self.api_authorization
        return auth is not None and not auth.lstrip().startswith("{")

    def inline_authorization(self) -> dict[str, Any] | None:
        if self.api_authorization is None or self.authorization_is_remote:
            return None
        return json.loads(self.api_authorization)
