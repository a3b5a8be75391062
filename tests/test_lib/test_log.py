"""Tests for the LOG helper."""

from unittest.mock import patch
from macroeval.config.settings import appsettings
from macroeval.lib import log


def test_log_debug_respects_beQuiet():
    with patch.object(log, "app_logger") as mock_logger:
        with patch.object(appsettings, "beQuiet", True):
            log.LOG("Pass 0: IntegerDivide rewrote '{%Integer-divide::7::2%}'")
        mock_logger.opt.assert_not_called()

        with patch.object(appsettings, "beQuiet", False):
            log.LOG("Fixed point reached")
        mock_logger.opt.return_value.log.assert_called_once_with("DEBUG", "Fixed point reached")


def test_log_warning_ignores_beQuiet():
    with patch.object(log, "app_logger") as mock_logger:
        with patch.object(appsettings, "beQuiet", True):
            log.LOG("Using default 5", level="WARNING")
        mock_logger.opt.assert_called_once_with(depth=1)
        mock_logger.opt.return_value.log.assert_called_once_with("WARNING", "Using default 5")
