"""Kernel error types."""


class FrankenstyleError(Exception):
    """Base error for frankenstyle."""


class ConfigError(FrankenstyleError):
    """Raised when configuration validation or loading fails."""


class ComponentCacheError(FrankenstyleError):
    """Raised when the component cache cannot be trusted and must not be rebuilt."""


class CodingError(FrankenstyleError):
    """Raised when a caller passes arguments that can never be valid."""
