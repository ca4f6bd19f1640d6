"""Ports (interfaces) for the ports-and-adapters architecture."""

from transit_adapters.domain.ports.network_provider import NetworkProvider

__all__ = ["NetworkProvider"]
