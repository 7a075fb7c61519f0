"""
Tests for the logging system.
"""

import logging
import logging.handlers
import sys

import pytest

from unicycle.config.exceptions import ConfigError, ConfigValidationError
from unicycle.core.exceptions import LifecycleError
from unicycle.lifecycle.manager import LifecycleManager
from unicycle.logging.manager import MANAGED_HANDLER_ATTR, LogFormatter, LoggingManager, context_prefix


def make_record(message="hello", level=logging.INFO, name="unicycle.test", args=None, **extra):
    record = logging.LogRecord(name, level, __file__, 10, message, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def managed_root_handlers():
    return [h for h in logging.getLogger().handlers if getattr(h, MANAGED_HANDLER_ATTR, False)]


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    root_logger.setLevel(level)
    for handler in managed_root_handlers():
        root_logger.removeHandler(handler)


@pytest.fixture
def logging_manager(restore_root_logger):
    manager = LoggingManager({"logging": {"level": "INFO"}})
    yield manager
    manager.shutdown()


class TestLogFormatter:
    """Test LogFormatter."""

    def test_default_format(self):
        formatter = LogFormatter(include_timestamp=False)

        assert formatter.format(make_record()) == "unicycle.test - INFO - hello"

    def test_timestamp_included_by_default(self):
        assert LogFormatter().format_string.startswith("%(asctime)s")

    def test_lifecycle_context_prefix(self):
        formatter = LogFormatter(include_context=True, include_timestamp=False)
        record = make_record(object_id=7, event_type="object:created")

        assert formatter.format(record) == (
            "unicycle.test - INFO - [Event: object:created] [Object: 7] hello"
        )

    def test_prefix_placed_on_message_when_text_repeats_logger_name(self):
        formatter = LogFormatter(include_context=True, include_timestamp=False)
        record = make_record(message="lifecycle", name="lifecycle", object_id=3)

        assert formatter.format(record) == "lifecycle - INFO - [Object: 3] lifecycle"

    def test_prefix_with_message_arguments(self):
        formatter = LogFormatter(include_context=True, include_timestamp=False)
        record = make_record(message="moved %s to %s", args=("a", "started"), event_type="object:stateChanged")

        assert formatter.format(record) == (
            "unicycle.test - INFO - [Event: object:stateChanged] moved a to started"
        )

    def test_prefix_with_empty_message(self):
        formatter = LogFormatter(format_string="%(message)s|%(name)s", include_context=True)

        assert formatter.format(make_record(message="", object_id=1)) == "[Object: 1] |unicycle.test"

    def test_original_record_is_not_modified(self):
        formatter = LogFormatter(include_context=True, include_timestamp=False)
        record = make_record(object_id=7)

        formatter.format(record)

        assert record.getMessage() == "hello"

    def test_context_ignored_when_disabled(self):
        formatter = LogFormatter(include_timestamp=False)

        assert "[Object:" not in formatter.format(make_record(object_id=7))

    def test_context_prefix_helper(self):
        assert context_prefix(make_record()) == ""
        assert context_prefix(make_record(object_id=0)) == "[Object: 0] "

    def test_colors(self):
        formatter = LogFormatter(use_colors=True, include_timestamp=False)

        formatted = formatter.format(make_record(level=logging.ERROR))

        assert formatted.startswith(LogFormatter.COLORS["ERROR"])
        assert formatted.endswith(LogFormatter.COLORS["RESET"])

    def test_exception_context_and_cause(self):
        formatter = LogFormatter()

        try:
            raise LifecycleError("not found", context={"object_id": 3}, cause=KeyError("three"))
        except LifecycleError:
            result = formatter.formatException(sys.exc_info())

        assert "LifecycleError" in result
        assert "Context: {'object_id': 3}" in result
        assert "Caused by: 'three'" in result

    def test_plain_exception(self):
        formatter = LogFormatter()

        try:
            raise ValueError("plain")
        except ValueError:
            result = formatter.formatException(sys.exc_info())

        assert "Context:" not in result
        assert "Caused by:" not in result


class TestLoggingManager:
    """Test LoggingManager."""

    def test_root_logger_configuration(self, restore_root_logger):
        manager = LoggingManager({"logging": {"level": "warning"}})

        assert logging.getLogger().level == logging.WARNING
        assert len(managed_root_handlers()) == 1
        assert managed_root_handlers()[0].formatter.include_context is True

        LoggingManager({"logging": {"level": "DEBUG"}})
        assert len(managed_root_handlers()) == 1

        manager.shutdown()
        assert managed_root_handlers() == []

    def test_no_console_handler_when_handlers_configured(self, restore_root_logger):
        manager = LoggingManager({"logging": {"handlers": {"console": {"type": "console"}}}})

        assert managed_root_handlers() == []
        manager.shutdown()

    def test_invalid_level(self, restore_root_logger):
        with pytest.raises(ConfigValidationError):
            LoggingManager({"logging": {"level": "VERBOSE"}})

    def test_get_logger_is_cached(self, logging_manager):
        logger = logging_manager.get_logger("unicycle.tests.cached", "DEBUG")

        assert logging_manager.get_logger("unicycle.tests.cached") is logger
        assert logger.level == logging.DEBUG

    def test_file_handler_from_config(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "lifecycle.log"
        manager = LoggingManager({"logging": {
            "handlers": {
                "file": {
                    "type": "file",
                    "filename": str(log_file),
                    "level": "DEBUG",
                    "formatter": {"include_timestamp": False},
                },
            },
            "loggers": {"unicycle.tests.file": {"handlers": ["file"], "level": "DEBUG"}},
        }})

        logger = manager.get_logger("unicycle.tests.file")
        logger.debug("persisted", extra={"object_id": 1, "event_type": "object:deleted"})
        manager.shutdown()

        assert log_file.read_text(encoding="utf-8").strip() == (
            "unicycle.tests.file - DEBUG - [Event: object:deleted] [Object: 1] persisted"
        )
        assert manager.handlers == {}

    def test_rotating_file_handler(self, restore_root_logger, tmp_path):
        manager = LoggingManager({"logging": {"handlers": {
            "rotating": {
                "type": "rotating_file",
                "filename": str(tmp_path / "rotating.log"),
                "max_bytes": 1024,
                "backup_count": 2,
            },
        }}})

        handler = manager.handlers["rotating"]
        assert isinstance(handler, logging.handlers.RotatingFileHandler)
        assert handler.maxBytes == 1024
        assert handler.backupCount == 2
        manager.shutdown()

    def test_unknown_handler_type(self, restore_root_logger):
        with pytest.raises(ConfigError, match="Unknown log handler type"):
            LoggingManager({"logging": {"handlers": {"bogus": {"type": "syslog"}}}})

    def test_invalid_formatter_options(self, restore_root_logger):
        with pytest.raises(ConfigError) as exc_info:
            LoggingManager({"logging": {"handlers": {"console": {"formatter": {"colour": True}}}}})

        assert isinstance(exc_info.value.cause, TypeError)

    def test_unwritable_log_file(self, restore_root_logger, tmp_path):
        missing_dir = tmp_path / "missing" / "app.log"

        with pytest.raises(ConfigError, match="Failed to create log handler"):
            LoggingManager({"logging": {"handlers": {"file": {"type": "file", "filename": str(missing_dir)}}}})

    def test_logger_with_unknown_handler(self, logging_manager):
        logging_manager.settings.loggers["unicycle.tests.unknown"] = {"handlers": ["absent"]}

        with pytest.raises(ConfigError, match="absent"):
            logging_manager.get_logger("unicycle.tests.unknown")

    def test_shutdown_detaches_handlers(self, restore_root_logger):
        manager = LoggingManager({"logging": {
            "handlers": {"null": {"type": "console"}},
            "loggers": {"unicycle.tests.shutdown": {"handlers": ["null"]}},
        }})
        logger = manager.get_logger("unicycle.tests.shutdown")
        handler = manager.handlers["null"]
        assert handler in logger.handlers

        manager.shutdown()

        assert handler not in logger.handlers
        assert manager.loggers == {}


class TestLifecycleLogging:
    """Lifecycle records rendered through a configured handler."""

    @pytest.mark.asyncio
    async def test_manager_records_carry_context(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "objects.log"
        logging_manager = LoggingManager({"logging": {
            "handlers": {"objects": {"type": "file", "filename": str(log_file), "formatter": {"include_timestamp": False}}},
            "loggers": {"unicycle.tests.objects": {"handlers": ["objects"], "level": "INFO"}},
        }})
        manager = LifecycleManager.from_config(
            {"lifecycle": {"id_strategy": "sequential"}},
            logger=logging_manager.get_logger("unicycle.tests.objects")
        )

        obj = await manager.create()
        await manager.start(obj.id)
        logging_manager.shutdown()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "unicycle.tests.objects - INFO - [Event: object:created] [Object: 1] Created lifecycle object 1"
        assert lines[1].startswith("unicycle.tests.objects - INFO - [Event: object:stateChanged] [Object: 1] ")
