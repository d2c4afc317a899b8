"""Tests for logging module."""

import logging
import re

from v6watch.logging import setup_logging


class TestSetupLogging:
    """Test logging setup."""

    def test_setup_logging_returns_logger(self):
        """Setup returns the v6watch logger."""
        logger = setup_logging()

        assert isinstance(logger, logging.Logger)
        assert logger.name == "v6watch"

    def test_default_level_is_warning(self):
        """Without options only warnings and above are logged."""
        logger = setup_logging()

        assert logger.level == logging.WARNING

    def test_setup_logging_creates_log_file(self, tmp_path):
        """Logging setup creates log file."""
        log_file = tmp_path / "test.log"

        logger = setup_logging("INFO", log_file)
        logger.info("test message")

        assert "test message" in log_file.read_text(encoding="utf-8")

    def test_setup_logging_creates_log_directory(self, tmp_path):
        """Logging setup creates log directory if needed."""
        log_file = tmp_path / "subdir" / "test.log"

        logger = setup_logging("INFO", log_file)
        logger.info("test message")

        assert log_file.exists()

    def test_log_levels_respected(self, tmp_path):
        """Only logs at configured level and above."""
        log_file = tmp_path / "test.log"

        logger = setup_logging("WARNING", log_file)
        logger.debug("debug message")
        logger.info("info message")
        logger.warning("warning message")
        logger.error("error message")

        content = log_file.read_text(encoding="utf-8")
        assert "debug message" not in content
        assert "info message" not in content
        assert "warning message" in content
        assert "error message" in content

    def test_child_loggers_reach_handlers(self, tmp_path):
        """Module loggers under v6watch write to the configured file."""
        log_file = tmp_path / "test.log"

        setup_logging("DEBUG", log_file)
        logging.getLogger("v6watch.ip_probe").debug("probing")

        assert "probing" in log_file.read_text(encoding="utf-8")

    def test_log_format_includes_timestamp(self, tmp_path):
        """Log entries have timestamp, level, message."""
        log_file = tmp_path / "test.log"

        logger = setup_logging("INFO", log_file)
        logger.info("test message")

        content = log_file.read_text(encoding="utf-8")
        pattern = r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} \[INFO\] test message"
        assert re.search(pattern, content)

    def test_setup_logging_idempotent(self, tmp_path):
        """Multiple setup calls don't duplicate handlers."""
        log_file = tmp_path / "test.log"

        logger1 = setup_logging("INFO", log_file)
        initial_handlers = len(logger1.handlers)
        logger2 = setup_logging("INFO", log_file)

        assert logger1 is logger2
        assert len(logger2.handlers) == initial_handlers
