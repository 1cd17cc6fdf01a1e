from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.evaluator",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Alert triggered for %s",
        args=("A",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_extra_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    output = formatter.format(_record(node="A", delta=82.5, active=True, unrelated="x"))

    assert output == "Alert triggered for A | node=A delta=82.5 active=True"


def test_formatter_skips_missing_and_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    assert formatter.format(_record(point_count=None)) == "Alert triggered for A"
