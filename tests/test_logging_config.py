"""Tests for logging configuration."""

import json
import logging

from rsmd._crosswalk.diagnostics import Diagnostics, Severity
from rsmd.logging_config import StructuredFormatter, logger, set_log_level


def test_structured_formatter_emits_json():
    record = logging.LogRecord("rsmd", logging.WARNING, __file__, 1, "ROR %s did not resolve", ("000000000",), None)
    entry = json.loads(StructuredFormatter().format(record))

    assert entry["level"] == "WARNING"
    assert entry["logger"] == "rsmd"
    assert entry["message"] == "ROR 000000000 did not resolve"


def test_set_log_level_updates_handlers():
    set_log_level("DEBUG")
    try:
        assert logger.level == logging.DEBUG
        assert all(handler.level == logging.DEBUG for handler in logger.handlers)
    finally:
        set_log_level("INFO")


def test_diagnostics_are_logged(caplog):
    diagnostics = Diagnostics()
    with caplog.at_level(logging.WARNING, logger="rsmd"):
        diagnostics.warning("Field category has no source", "category")

    assert "Field category has no source" in caplog.text
    assert diagnostics.items[0].severity is Severity.WARNING
    assert str(diagnostics.items[0]) == "warning: [category] Field category has no source"
