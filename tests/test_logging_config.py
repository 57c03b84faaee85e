"""Tests for logging configuration helpers."""

from __future__ import annotations

import logging

from backlogiq.utils.logging_config import ExtraFormatter, configure_logging, get_logger


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("backlogiq.test", logging.INFO, __file__, 1, "Saved %s", ("CEO",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_extra_fields() -> None:
    formatter = ExtraFormatter("%(levelname)s %(message)s")
    output = formatter.format(_record(organization_id="org-1", positions=3))
    assert output == "INFO Saved CEO | organization_id='org-1' positions=3"


def test_formatter_without_extras() -> None:
    assert ExtraFormatter("%(message)s").format(_record()) == "Saved CEO"


def test_configure_logging_sets_level_and_handler() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging("debug")
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, ExtraFormatter)
        assert get_logger("backlogiq.hierarchy") is logging.getLogger("backlogiq.hierarchy")
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
