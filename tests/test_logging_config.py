"""
Tests for the package logging setup.
"""

import logging
import sys

import pytest

from water_sort.logging_config import setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("water_sort")
    saved_level = logger.level
    saved_handlers = list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        if handler not in saved_handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(saved_level)


class TestSetupLogging:
    """Test handler installation on the package logger."""

    def test_returns_package_logger(self, package_logger):
        """The configured logger is the 'water_sort' logger at the given level."""
        logger = setup_logging(logging.WARNING)
        assert logger is package_logger
        assert logger.level == logging.WARNING

    def test_console_goes_to_stderr(self, package_logger):
        """Console records go to stderr, leaving stdout for output."""
        setup_logging()
        streams = [
            h.stream for h in package_logger.handlers
            if type(h) is logging.StreamHandler
        ]
        assert streams == [sys.stderr]

    def test_repeat_calls_do_not_stack(self, package_logger):
        """Calling twice leaves a single console handler."""
        setup_logging()
        setup_logging(logging.DEBUG)
        consoles = [h for h in package_logger.handlers if type(h) is logging.StreamHandler]
        assert len(consoles) == 1
        assert consoles[0].level == logging.DEBUG

    def test_caller_handlers_survive(self, package_logger):
        """Handlers attached by the caller are kept across calls."""
        own = logging.NullHandler()
        package_logger.addHandler(own)

        setup_logging()
        setup_logging()

        assert own in package_logger.handlers

    def test_log_file_appends(self, package_logger, tmp_path):
        """The optional file receives timestamped records and is appended to."""
        path = tmp_path / "water_sort.log"
        path.write_text("earlier\n")

        logger = setup_logging(logging.INFO, log_file=str(path))
        logger.getChild("session").info("level complete")
        for handler in logger.handlers:
            handler.flush()

        text = path.read_text()
        assert text.startswith("earlier\n")
        assert "INFO    water_sort.session: level complete" in text
