"""Kernel helpers shared by the component registry."""

from .errors import CodingError, ComponentCacheError, ConfigError, FrankenstyleError

__all__ = [
    "CodingError",
    "ComponentCacheError",
    "ConfigError",
    "FrankenstyleError",
]
