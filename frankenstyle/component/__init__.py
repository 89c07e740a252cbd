"""Plugin and subsystem discovery with a persistent cache."""

from .builder import ComponentBuilder
from .cache import CACHE_FILENAME, ComponentCacheStore
from .registry import ClassLocation, ComponentRegistry
from .snapshot import ComponentSnapshot

__all__ = [
    "CACHE_FILENAME",
    "ClassLocation",
    "ComponentBuilder",
    "ComponentCacheStore",
    "ComponentRegistry",
    "ComponentSnapshot",
]
