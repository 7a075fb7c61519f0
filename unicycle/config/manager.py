"""
Configuration management system for the unicycle lifecycle framework.
"""

from collections.abc import Callable
from copy import deepcopy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator
import yaml

from .exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_ID_STRATEGIES = ["uuid", "sequential"]


class LifecycleSection(BaseModel):
    """Settings of the lifecycle manager."""

    max_event_history: int = Field(default=1000, gt=0)
    record_history: bool = True
    id_strategy: str = "uuid"
    strict_store: bool = False

    model_config = {"extra": "forbid"}

    @field_validator("id_strategy")
    @classmethod
    def validate_id_strategy(cls, v):
        """Validate the id generation strategy."""
        if v not in VALID_ID_STRATEGIES:
            raise ValueError(f"id_strategy must be one of: {VALID_ID_STRATEGIES}")
        return v


class LoggingSection(BaseModel):
    """Settings consumed by the logging manager."""

    level: str = "INFO"
    format: Optional[str] = None
    handlers: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    loggers: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Validate log level."""
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {VALID_LOG_LEVELS}")
        return v.upper()


class ConfigSchema(BaseModel):
    """
    Configuration schema definition.

    Unknown top-level sections are kept so applications can share one
    configuration file with the framework.
    """

    lifecycle: LifecycleSection = Field(default_factory=LifecycleSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)

    model_config = {"extra": "allow"}


class ConfigValidator:
    """
    Validator for configuration data.

    Checks the configuration against ``ConfigSchema`` and reports failures
    as ``ConfigValidationError``.
    """

    def validate(self, config: Dict[str, Any]) -> ConfigSchema:
        """
        Validate configuration data.

        Args:
            config: Configuration dictionary to validate

        Returns:
            The parsed configuration with defaults filled in

        Raises:
            ConfigValidationError: If validation fails
        """
        if not isinstance(config, dict):
            raise ConfigValidationError(
                "Configuration must be a dictionary",
                context={"type": type(config).__name__}
            )

        try:
            return ConfigSchema.model_validate(config)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            ]
            raise ConfigValidationError(
                f"Invalid configuration: {'; '.join(errors)}",
                context={"error_count": len(errors)},
                cause=e
            ) from e


def _parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Not a boolean: {value}")


class ConfigLoader:
    """
    Configuration loader supporting multiple formats.

    Provides loading from files, dictionaries, and environment variables
    with support for JSON and YAML formats.
    """

    def __init__(self) -> None:
        """Initialize the configuration loader."""
        self.supported_formats = ['.json', '.yaml', '.yml']

    def load_from_file(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            file_path: Path to the configuration file

        Returns:
            Configuration dictionary

        Raises:
            ConfigNotFoundError: If file is not found
            ConfigError: If file format is unsupported or parsing fails
        """
        path = Path(file_path)

        if not path.exists():
            raise ConfigNotFoundError(
                f"Configuration file not found: {file_path}",
                context={"file_path": str(file_path)}
            )

        if path.suffix not in self.supported_formats:
            raise ConfigError(
                f"Unsupported file format: {path.suffix}. Supported formats: {self.supported_formats}",
                context={"file_path": str(file_path), "suffix": path.suffix}
            )

        try:
            with open(path, encoding='utf-8') as f:
                if path.suffix == '.json':
                    return json.load(f)
                return yaml.safe_load(f) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to parse configuration file: {e}", cause=e) from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file: {e}", cause=e) from e

    def load_from_dict(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Return a deep copy of a configuration dictionary."""
        return deepcopy(config_dict)

    def load_from_environment(self, prefix: str = "UNICYCLE_") -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        Only variables that are set end up in the result.

        Args:
            prefix: Prefix for environment variable names

        Returns:
            Configuration dictionary built from environment variables

        Raises:
            ConfigError: If a variable cannot be converted
        """
        config: Dict[str, Any] = {}

        env_mapping = {
            f"{prefix}LIFECYCLE_MAX_EVENT_HISTORY": ("lifecycle", "max_event_history", int),
            f"{prefix}LIFECYCLE_RECORD_HISTORY": ("lifecycle", "record_history", _parse_bool),
            f"{prefix}LIFECYCLE_ID_STRATEGY": ("lifecycle", "id_strategy", str),
            f"{prefix}LIFECYCLE_STRICT_STORE": ("lifecycle", "strict_store", _parse_bool),
            f"{prefix}LOGGING_LEVEL": ("logging", "level", str),
            f"{prefix}LOGGING_FORMAT": ("logging", "format", str),
        }

        for env_var, (section, key, convert) in env_mapping.items():
            value = os.getenv(env_var)
            if value is None:
                continue
            try:
                config.setdefault(section, {})[key] = convert(value)
            except (ValueError, TypeError) as e:
                raise ConfigError(
                    f"Invalid value for {env_var}: {value}",
                    context={"env_var": env_var},
                    cause=e
                ) from e

        return config

    def merge_configs(self, base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge two configuration dictionaries.

        Args:
            base_config: Base configuration
            override_config: Configuration to merge (takes precedence)

        Returns:
            Merged configuration dictionary
        """
        merged = deepcopy(base_config)
        self._deep_merge(merged, override_config)
        return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge two dictionaries."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = deepcopy(value)


class ConfigManager:
    """
    Centralized configuration management.

    Loads, validates and exposes the configuration shared by the
    lifecycle and logging managers.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the configuration manager.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.loader = ConfigLoader()
        self.validator = ConfigValidator()
        self.config: Optional[Dict[str, Any]] = None
        self.schema: Optional[ConfigSchema] = None
        self.config_file_path: Optional[Path] = None
        self.change_callbacks: Dict[str, List[Callable]] = {}

    def load_config(self, source: Union[str, Path, Dict[str, Any]]) -> None:
        """
        Load configuration from a file path or a dictionary.

        Args:
            source: Configuration source

        Raises:
            ConfigError: If loading or validation fails
        """
        try:
            if isinstance(source, (str, Path)):
                self.config_file_path = Path(source)
                config = self.loader.load_from_file(source)
                self.logger.info(f"Loaded configuration from file: {source}")
            elif isinstance(source, dict):
                config = self.loader.load_from_dict(source)
                self.logger.info("Loaded configuration from dictionary")
            else:
                raise ConfigError(f"Unsupported configuration source type: {type(source)}")

            self.schema = self.validator.validate(config)
            self.config = config
            self.logger.info("Configuration validation passed")

        except Exception as e:
            self.logger.error(f"Failed to load configuration: {e}")
            raise

    def reload_config(self) -> None:
        """
        Reload configuration from the file it was loaded from.

        Raises:
            ConfigError: If no file path is set or reload fails
        """
        if self.config_file_path is None:
            raise ConfigError("No configuration file path set for reload")

        self.load_config(self.config_file_path)
        self.logger.info("Configuration reloaded successfully")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "lifecycle.max_event_history")
            default: Default value if key is not found

        Returns:
            Configuration value or default
        """
        if self.config is None:
            return default

        value: Any = self.config
        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value using dot notation.

        The result is not re-validated; call ``validate_config`` afterwards.

        Args:
            key: Configuration key (e.g., "lifecycle.strict_store")
            value: Value to set
        """
        if self.config is None:
            self.config = {}

        keys = key.split('.')
        current = self.config

        for k in keys[:-1]:
            if k not in current:
                current[k] = {}
            current = current[k]

        old_value = current.get(keys[-1])
        current[keys[-1]] = value

        self._trigger_change_callbacks(key, old_value, value)

        self.logger.debug(f"Set configuration {key} = {value}")

    def validate_config(self) -> ConfigSchema:
        """
        Validate the current configuration.

        Raises:
            ConfigError: If no configuration is loaded
            ConfigValidationError: If validation fails
        """
        if self.config is None:
            raise ConfigError("No configuration loaded to validate")

        self.schema = self.validator.validate(self.config)
        return self.schema

    def get_lifecycle_config(self) -> Dict[str, Any]:
        """Return the validated lifecycle section with defaults applied."""
        schema = self.schema or self.validator.validate(self.config or {})
        return schema.lifecycle.model_dump()

    def save_config(self, file_path: Union[str, Path]) -> None:
        """
        Save current configuration to a file.

        Args:
            file_path: Path to save the configuration

        Raises:
            ConfigError: If saving fails
        """
        if self.config is None:
            raise ConfigError("No configuration loaded to save")

        path = Path(file_path)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            with open(path, 'w', encoding='utf-8') as f:
                if path.suffix in ['.yaml', '.yml']:
                    yaml.safe_dump(self.config, f, default_flow_style=False, allow_unicode=True)
                else:
                    json.dump(self.config, f, indent=2, ensure_ascii=False)

            self.logger.info(f"Configuration saved to: {file_path}")

        except OSError as e:
            self.logger.error(f"Failed to save configuration: {e}")
            raise ConfigError(f"Failed to save configuration to {file_path}", cause=e) from e

    def register_change_callback(self, key: str, callback: Callable[[str, Any, Any], None]) -> None:
        """
        Register a callback for configuration changes.

        Args:
            key: Configuration key to monitor
            callback: Callback function (key, old_value, new_value)
        """
        self.change_callbacks.setdefault(key, []).append(callback)
        self.logger.debug(f"Registered change callback for key: {key}")

    def unregister_change_callback(self, key: str, callback: Callable) -> None:
        """
        Unregister a change callback.

        Args:
            key: Configuration key
            callback: Callback function to remove
        """
        if key in self.change_callbacks:
            try:
                self.change_callbacks[key].remove(callback)
                if not self.change_callbacks[key]:
                    del self.change_callbacks[key]
                self.logger.debug(f"Unregistered change callback for key: {key}")
            except ValueError:
                pass  # Callback not found

    def apply_environment_overrides(self, prefix: str = "UNICYCLE_") -> None:
        """
        Apply environment variable overrides to current configuration.

        Args:
            prefix: Prefix for environment variable names

        Raises:
            ConfigValidationError: If the overridden configuration is invalid
        """
        env_config = self.loader.load_from_environment(prefix)
        merged = self.loader.merge_configs(self.config or {}, env_config)

        self.schema = self.validator.validate(merged)
        self.config = merged

        self.logger.info("Applied environment variable overrides")

    def get_config_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the current configuration.

        Returns:
            Configuration summary dictionary
        """
        if self.config is None:
            return {"status": "No configuration loaded"}

        return {
            "status": "Configuration loaded",
            "id_strategy": self.get("lifecycle.id_strategy", "uuid"),
            "max_event_history": self.get("lifecycle.max_event_history"),
            "log_level": self.get("logging.level"),
            "config_file": str(self.config_file_path) if self.config_file_path else None
        }

    def _trigger_change_callbacks(self, key: str, old_value: Any, new_value: Any) -> None:
        """Trigger change callbacks for a configuration key."""
        for callback in self.change_callbacks.get(key, []):
            try:
                callback(key, old_value, new_value)
            except Exception as e:
                self.logger.error(f"Error in change callback for {key}: {e}")
