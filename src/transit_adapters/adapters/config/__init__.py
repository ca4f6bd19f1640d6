"""Configuration adapters."""

from transit_adapters.adapters.config.app_config import AppConfig

__all__ = ["AppConfig"]
