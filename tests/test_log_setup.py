"""
Tests for logging setup.
"""

import logging
from logging.handlers import RotatingFileHandler

from autosrt.log_setup import setup_logging


def installed(handler_type):
    return [h for h in logging.getLogger().handlers if type(h) is handler_type]


class TestSetupLogging:

    def test_console_and_file(self, tmp_path):
        setup_logging(log_level=logging.DEBUG, log_dir=str(tmp_path / "logs"), log_file="run.log")
        assert len(installed(logging.StreamHandler)) == 1
        assert len(installed(RotatingFileHandler)) == 1
        assert logging.getLogger().level == logging.DEBUG
        assert (tmp_path / "logs" / "run.log").exists()

    def test_console_only(self):
        setup_logging(log_dir=None)
        assert installed(RotatingFileHandler) == []

    def test_repeated_setup_replaces_handlers(self, tmp_path):
        setup_logging(log_dir=str(tmp_path))
        setup_logging(log_dir=str(tmp_path))
        assert len(installed(logging.StreamHandler)) == 1
        assert len(installed(RotatingFileHandler)) == 1

    def test_quiets_client_libraries(self):
        setup_logging(log_level=logging.DEBUG, log_dir=None)
        assert logging.getLogger("google").level == logging.WARNING
