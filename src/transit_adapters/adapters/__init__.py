"""Adapters layer - external system integrations."""

from transit_adapters.adapters.config import AppConfig
from transit_adapters.adapters.hafas_api import HafasClientInterfaceProvider, HafasProfile
from transit_adapters.adapters.ref_codec import decode_ref, encode_ref

__all__ = [
    "AppConfig",
    "HafasClientInterfaceProvider",
    "HafasProfile",
    "decode_ref",
    "encode_ref",
]
