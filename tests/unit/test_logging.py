import json
import logging

import structlog

from wsp.infrastructure.observability.logging import (
    SERVICE_NAME,
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)


def test_request_context_bound_and_cleared():
    bind_request_context("req-9", user_id="user-001")

    assert structlog.contextvars.get_contextvars() == {"request_id": "req-9", "user_id": "user-001"}

    clear_request_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_binding_replaces_previous_request():
    bind_request_context("req-1", user_id="user-001")
    bind_request_context("req-2")

    assert structlog.contextvars.get_contextvars() == {"request_id": "req-2"}
    clear_request_context()


def test_entries_carry_request_id_and_service(caplog):
    setup_logging("INFO", json_logs=True)
    caplog.set_level(logging.INFO)
    bind_request_context("req-42")
    try:
        get_logger("wsp.tests").info("Task added", week=12)
    finally:
        clear_request_context()

    entry = json.loads(caplog.records[-1].getMessage())
    assert entry["event"] == "Task added"
    assert entry["request_id"] == "req-42"
    assert entry["service"] == SERVICE_NAME
    assert entry["week"] == 12
    assert entry["level"] == "info"
