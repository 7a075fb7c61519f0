"""
Configuration-specific exceptions.
"""

from ..core.exceptions import UnicycleError


class ConfigError(UnicycleError):
    """Base exception for configuration-related errors."""
    pass


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""
    pass


class ConfigNotFoundError(ConfigError):
    """Exception raised when configuration is not found."""
    pass
