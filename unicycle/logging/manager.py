"""
Logging setup for the unicycle lifecycle framework.

The lifecycle manager logs with ``object_id`` and ``event_type`` record
attributes; ``LogFormatter`` renders them as a message prefix and
``LoggingManager`` applies the ``logging`` configuration section.
"""

import copy
import logging
import logging.handlers
from typing import Any, ClassVar, Dict, Optional, Union

from ..config.exceptions import ConfigError
from ..config.manager import ConfigValidator, LoggingSection

# Attribute marking handlers installed on the root logger by a LoggingManager
MANAGED_HANDLER_ATTR = "_unicycle_managed"

# Record attribute -> label, in prefix order
CONTEXT_FIELDS = (("event_type", "Event"), ("object_id", "Object"))


class LogFormatter(logging.Formatter):
    """
    Formatter for lifecycle records.

    With ``include_context`` the message of a record carrying lifecycle
    attributes becomes ``[Event: object:created] [Object: 7] <message>``.
    """

    COLORS: ClassVar[Dict[str, str]] = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m'
    }

    def __init__(
        self,
        format_string: Optional[str] = None,
        date_format: str = "%Y-%m-%d %H:%M:%S",
        use_colors: bool = False,
        include_context: bool = False,
        include_timestamp: bool = True
    ):
        """
        Initialize the formatter.

        Args:
            format_string: Custom format string
            date_format: Date format string
            use_colors: Whether to color the output by level
            include_context: Whether to prefix lifecycle context
            include_timestamp: Whether the default format starts with the time
        """
        if format_string is None:
            format_string = "%(name)s - %(levelname)s - %(message)s"
            if include_timestamp:
                format_string = "%(asctime)s - " + format_string

        super().__init__(format_string, date_format)

        self.format_string = format_string
        self.use_colors = use_colors
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        if self.include_context:
            prefix = context_prefix(record)
            if prefix:
                # Handlers share the record, so the prefix goes on a copy
                record = copy.copy(record)
                record.msg = prefix + record.getMessage()
                record.args = None

        formatted = super().format(record)

        if self.use_colors and record.levelname in self.COLORS:
            formatted = f"{self.COLORS[record.levelname]}{formatted}{self.COLORS['RESET']}"

        return formatted

    def formatException(self, ei: Any) -> str:
        """Format a traceback, adding context and cause of unicycle errors."""
        result = super().formatException(ei)

        exception = ei[1] if ei else None
        if getattr(exception, 'context', None):
            result += f"\nContext: {exception.context}"
        if getattr(exception, 'cause', None):
            result += f"\nCaused by: {exception.cause}"

        return result


def context_prefix(record: logging.LogRecord) -> str:
    """Build the ``[Event: ...] [Object: ...] `` prefix of a record."""
    return "".join(
        f"[{label}: {getattr(record, attr)}] "
        for attr, label in CONTEXT_FIELDS
        if getattr(record, attr, None) is not None
    )


class LoggingManager:
    """
    Applies the ``logging`` configuration section.

    Named handlers from ``handlers`` are built up front and attached to
    the loggers that list them under ``loggers``. When no handlers are
    configured the root logger gets a console handler that shows
    lifecycle context.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize the logging manager.

        Args:
            config: Full configuration dictionary

        Raises:
            ConfigValidationError: If the ``logging`` section is invalid
            ConfigError: If a handler cannot be built
        """
        self.settings: LoggingSection = ConfigValidator().validate(
            {"logging": config.get("logging", {})}
        ).logging
        self.handlers: Dict[str, logging.Handler] = {}
        self.loggers: Dict[str, logging.Logger] = {}

        try:
            for name, handler_config in self.settings.handlers.items():
                self.handlers[name] = self._build_handler(name, handler_config)
        except ConfigError:
            self._close_handlers()
            raise

        self._configure_root_logger()

    def _configure_root_logger(self) -> None:
        root_logger = logging.getLogger()
        root_logger.setLevel(self.settings.level)

        # Replace the console handler of an earlier manager
        for handler in root_logger.handlers[:]:
            if getattr(handler, MANAGED_HANDLER_ATTR, False):
                root_logger.removeHandler(handler)
                handler.close()

        if not self.handlers:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(
                LogFormatter(format_string=self.settings.format, include_context=True)
            )
            setattr(console_handler, MANAGED_HANDLER_ATTR, True)
            root_logger.addHandler(console_handler)

    def _build_handler(self, name: str, handler_config: Dict[str, Any]) -> logging.Handler:
        """
        Build one handler from its configuration.

        Supported types are ``console``, ``file`` and ``rotating_file``.
        The ``formatter`` mapping is passed to ``LogFormatter``, with
        lifecycle context enabled unless it says otherwise.

        Raises:
            ConfigError: If the type is unknown or the handler cannot be created
        """
        handler_type = handler_config.get("type", "console")
        filename = handler_config.get("filename", f"logs/{name}.log")

        try:
            if handler_type == "console":
                handler: logging.Handler = logging.StreamHandler()
            elif handler_type == "file":
                handler = logging.FileHandler(filename)
            elif handler_type == "rotating_file":
                handler = logging.handlers.RotatingFileHandler(
                    filename,
                    maxBytes=handler_config.get("max_bytes", 10 * 1024 * 1024),
                    backupCount=handler_config.get("backup_count", 5)
                )
            else:
                raise ConfigError(
                    f"Unknown log handler type: {handler_type}",
                    context={"handler": name}
                )

            try:
                if "level" in handler_config:
                    handler.setLevel(str(handler_config["level"]).upper())
                formatter_options = {"include_context": True, **handler_config.get("formatter", {})}
                handler.setFormatter(LogFormatter(**formatter_options))
            except (TypeError, ValueError):
                handler.close()
                raise

        except (OSError, TypeError, ValueError) as e:
            raise ConfigError(
                f"Failed to create log handler {name}: {e}",
                context={"handler": name, "type": handler_type},
                cause=e
            ) from e

        return handler

    def get_logger(self, name: str, level: Union[str, int, None] = None) -> logging.Logger:
        """
        Get a logger configured from the ``loggers`` section.

        Args:
            name: Logger name
            level: Optional level overriding the configured one

        Returns:
            The configured logger

        Raises:
            ConfigError: If the logger lists a handler that is not configured
        """
        if name in self.loggers:
            return self.loggers[name]

        logger = logging.getLogger(name)
        logger_config = self.settings.loggers.get(name, {})

        level = level or logger_config.get("level")
        if level:
            logger.setLevel(level.upper() if isinstance(level, str) else level)

        for handler_name in logger_config.get("handlers", []):
            if handler_name not in self.handlers:
                raise ConfigError(
                    f"Logger {name} uses unknown handler: {handler_name}",
                    context={"logger": name, "handler": handler_name}
                )
            if self.handlers[handler_name] not in logger.handlers:
                logger.addHandler(self.handlers[handler_name])

        self.loggers[name] = logger
        return logger

    def shutdown(self) -> None:
        """Detach and close every handler this manager installed."""
        for logger in self.loggers.values():
            for handler in self.handlers.values():
                logger.removeHandler(handler)

        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            if getattr(handler, MANAGED_HANDLER_ATTR, False):
                root_logger.removeHandler(handler)
                handler.close()

        self._close_handlers()
        self.loggers.clear()

    def _close_handlers(self) -> None:
        for handler in self.handlers.values():
            handler.close()
        self.handlers.clear()
