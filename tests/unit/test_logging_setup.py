"""
Tests for root logger configuration.
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from mediahub.core.config_schemas import LoggingSettings
from mediahub.core.logging_setup import setup_logging


pytestmark = pytest.mark.usefixtures("restore_logging")


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_level_from_settings(self):
        setup_logging(LoggingSettings(level="INFO"))

        assert logging.getLogger().level == logging.INFO
        assert logging.getLogger("aiohttp").level == logging.WARNING

    def test_debug_overrides_level(self):
        setup_logging(LoggingSettings(level="ERROR"), debug=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_rotating_file(self, tmp_path):
        log_file = tmp_path / "logs" / "mediahub.log"
        setup_logging(LoggingSettings(file=str(log_file), max_size="1KB", backup_count=2))

        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 1024
        assert file_handlers[0].backupCount == 2

        logging.getLogger("mediahub.test").warning("written to file")
        file_handlers[0].flush()
        assert "written to file" in log_file.read_text(encoding="utf-8")
