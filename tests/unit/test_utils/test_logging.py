"""Tests for logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

from avswitcher.config.settings import LoggingConfig
from avswitcher.utils.logging import setup_logging


class TestSetupLogging:
    def test_sets_level(self) -> None:
        setup_logging(LoggingConfig(level="DEBUG"))
        assert logging.getLogger("avswitcher").level == logging.DEBUG

    def test_repeated_setup_does_not_stack_handlers(self) -> None:
        setup_logging()
        setup_logging()
        assert len(logging.getLogger("avswitcher").handlers) == 1

    def test_file_handler(self, tmp_path: Path) -> None:
        log_file = tmp_path / "avswitcher.log"
        setup_logging(LoggingConfig(file=str(log_file)))
        logging.getLogger("avswitcher.channel").warning("device unreachable")
        for handler in logging.getLogger("avswitcher").handlers:
            handler.flush()
        assert "device unreachable" in log_file.read_text()
        setup_logging()
