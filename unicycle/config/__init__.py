"""
Configuration management module for the unicycle lifecycle framework.
"""

from .exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError
from .manager import (
    ConfigLoader,
    ConfigManager,
    ConfigSchema,
    ConfigValidator,
    LifecycleSection,
    LoggingSection,
)

__all__ = [
    # Exceptions
    "ConfigError",
    "ConfigLoader",
    # Main classes
    "ConfigManager",
    "ConfigNotFoundError",
    "ConfigSchema",
    "ConfigValidationError",
    "ConfigValidator",
    "LifecycleSection",
    "LoggingSection",
]
