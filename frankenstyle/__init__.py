"""Component discovery and cache engine for plugin-based application trees."""

__version__ = "0.3.0"
