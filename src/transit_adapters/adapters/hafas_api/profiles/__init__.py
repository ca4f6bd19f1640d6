"""Concrete HAFAS backend profiles."""

from transit_adapters.adapters.hafas_api.profiles.bvg_profile import BVG_PROFILE
from transit_adapters.adapters.hafas_api.profiles.rmv_profile import RMV_PROFILE
from transit_adapters.adapters.hafas_api.profiles.vao_profile import SVV_PROFILE, VAO_PROFILE

__all__ = ["BVG_PROFILE", "RMV_PROFILE", "SVV_PROFILE", "VAO_PROFILE"]
