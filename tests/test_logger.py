# tests/test_logger.py - Tests for logging setup
"""
Unit tests for setup_logging and get_logger.
"""

import logging

import pytest
from spectroscope.utils.logger import ColoredFormatter, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestLogging:
    """Test cases for the logging helpers"""

    def test_file_gets_plain_level_names(self, tmp_path):
        """Test colors never reach the log file"""
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(level='INFO', log_file=str(log_file), use_colors=True)

        get_logger("spectroscope.test").warning("edge 3 missing")
        for handler in logging.getLogger().handlers:
            handler.flush()

        text = log_file.read_text()
        assert " - WARNING - edge 3 missing" in text
        assert "\x1b[" not in text

    def test_console_formatter_choice(self):
        """Test the console handler is colored only on request"""
        setup_logging(use_colors=False)
        assert not isinstance(logging.getLogger().handlers[0].formatter, ColoredFormatter)

        setup_logging(use_colors=True)
        assert isinstance(logging.getLogger().handlers[0].formatter, ColoredFormatter)

    def test_get_logger_namespace(self):
        """Test loggers are placed below the package logger"""
        assert get_logger("spectroscope.cli").name == "spectroscope.cli"
        assert get_logger("spectroscope").name == "spectroscope"
        assert get_logger("__main__").name == "spectroscope.__main__"
