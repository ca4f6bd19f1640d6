"""HAFAS client interface adapters."""

from transit_adapters.adapters.hafas_api.hafas_provider import HafasClientInterfaceProvider
from transit_adapters.adapters.hafas_api.profile import HafasProfile

__all__ = [
    "HafasClientInterfaceProvider",
    "HafasProfile",
]
