"""Unified public-transit query layer."""

__version__ = "0.1.0"
