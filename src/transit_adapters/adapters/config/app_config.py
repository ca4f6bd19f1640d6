"""12-factor configuration adapter using environment variables and TOML config."""

import json
import logging
import tomllib
from dataclasses import replace
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from transit_adapters.adapters.hafas_api.profile import HafasProfile
from transit_adapters.adapters.hafas_api.signing import Salt

logger = logging.getLogger(__name__)

# Keys of the [hafas] table copied onto the profile as they are.
_PROFILE_STRING_KEYS = ("api_base", "api_endpoint", "api_version", "api_ext", "timezone")


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_prefix="TA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    request_timeout_seconds: float = Field(
        default=15.0, description="Total timeout for a single backend request in seconds"
    )
    user_agent: str | None = Field(
        default=None, description="User-Agent header sent when the profile defines none"
    )
    language: str = Field(default="de", description="Language of backend texts: 'de' or 'en'")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates of backends")

    # TOML config file path
    config_file: str | None = Field(
        default=None,
        description="Path to TOML configuration file with a [hafas] section overriding the profile",
    )

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        """Validate language is either 'de' or 'en'."""
        if v.lower() not in ("de", "en"):
            raise ValueError("language must be either 'de' or 'en'")
        return v.lower()

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    def load_hafas_overrides(self) -> dict[str, Any]:
        """Read the [hafas] table of the TOML config file; empty without a file."""
        if not self.config_file:
            return {}

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)

        hafas = toml_data.get("hafas", {})
        if not isinstance(hafas, dict):
            raise ValueError("[hafas] must be a table")
        return hafas

    def build_profile(self, base: HafasProfile) -> HafasProfile:
        """Apply the configured language and [hafas] overrides to a profile."""
        overrides = self.load_hafas_overrides()
        changes: dict[str, Any] = {"language": self.language}

        for key in _PROFILE_STRING_KEYS:
            if key in overrides:
                changes[key] = str(overrides[key])
        if "api_client" in overrides:
            changes["api_client"] = dict(overrides["api_client"])
        if "api_authorization" in overrides:
            authorization = overrides["api_authorization"]
            # A table is an inline authorization object; a string may also be a URL.
            changes["api_authorization"] = (
                json.dumps(authorization, separators=(",", ":"))
                if isinstance(authorization, dict)
                else str(authorization)
            )
        for key in ("checksum_salt", "mic_mac_salt"):
            if key in overrides:
                changes[key] = _salt(overrides[key])

        if overrides:
            logger.info(f"Overriding {base.network} profile keys: {', '.join(sorted(overrides))}")
        return replace(base, **changes)


def _salt(value: Any) -> Salt:
    """A string is a raw salt; a table holds 'encrypted' and 'key'."""
    if isinstance(value, str):
        return Salt(raw=value.encode("utf-8"))
    if isinstance(value, dict):
        return Salt(encrypted=value.get("encrypted"), key=value.get("key"))
    raise ValueError(f"invalid salt configuration: {value!r}")
