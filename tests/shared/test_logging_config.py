"""Unit tests for structured logging formatters and context propagation."""

from __future__ import annotations

import json
import logging

from packages.portal_shared.logging import clear_context, get_context, log_context
from packages.portal_shared.logging.config import (
    ContextFilter,
    JsonFormatter,
    PlainFormatter,
    configure_logging,
)


def _record(message: str = "validation decided") -> logging.LogRecord:
    return logging.LogRecord(
        name="services.action.validation_gate",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )


def test_json_formatter_merges_bound_context() -> None:
    record = _record()
    with log_context({"requester_id": "verifier@example.com", "decision": None}):
        ContextFilter().filter(record)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "validation decided"
    assert payload["level"] == "INFO"
    assert payload["requester_id"] == "verifier@example.com"
    assert "decision" not in payload


def test_plain_formatter_appends_sorted_context() -> None:
    record = _record()
    with log_context({"subject_id": "EMP006", "decision": "rejected"}):
        ContextFilter().filter(record)

    rendered = PlainFormatter().format(record)

    assert rendered.endswith("validation decided decision=rejected subject_id=EMP006")


def test_log_context_restores_previous_values() -> None:
    clear_context()
    with log_context({"trace_id": "t-1"}):
        assert get_context() == {"trace_id": "t-1"}
    assert get_context() == {}


def test_configure_logging_replaces_root_handlers() -> None:
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        configure_logging(level="debug", json_output=False, service="verify-portal")
        configure_logging(level="warning", json_output=True, service="verify-portal")

        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert get_context()["service"] == "verify-portal"
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        clear_context()
