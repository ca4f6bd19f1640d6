"""Domain layer for transit adapters."""
