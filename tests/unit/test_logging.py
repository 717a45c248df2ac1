"""Unit tests for structlog configuration and per-request log context."""

from __future__ import annotations

import logging

import structlog

from duende.utils.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
)


class TestRequestContext:
    def teardown_method(self) -> None:
        clear_request_context()

    def test_reuses_incoming_request_id(self) -> None:
        request_id = bind_request_context("GET", "/events", request_id="edge-123")

        assert request_id == "edge-123"
        assert structlog.contextvars.get_contextvars() == {
            "request_id": "edge-123",
            "method": "GET",
            "path": "/events",
        }

    def test_generates_request_id(self) -> None:
        request_id = bind_request_context("POST", "/trip-planner")
        assert len(request_id) == 16
        assert structlog.contextvars.get_contextvars()["request_id"] == request_id

    def test_new_request_replaces_previous_context(self) -> None:
        structlog.contextvars.bind_contextvars(leftover="x")
        bind_request_context("GET", "/health", request_id="r-2")
        assert "leftover" not in structlog.contextvars.get_contextvars()

    def test_clear(self) -> None:
        bind_request_context("GET", "/version")
        clear_request_context()
        assert structlog.contextvars.get_contextvars() == {}


class TestConfigureLogging:
    def test_quiets_driver_loggers(self) -> None:
        configure_logging(log_level="DEBUG")
        assert logging.getLogger("pymongo").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger().level == logging.DEBUG

    def test_json_output_renders_one_object_per_line(self, capsys) -> None:
        configure_logging(log_level="INFO", json_output=True)
        structlog.get_logger("duende.test").info("events_search", results=3)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        assert '"event": "events_search"' in line
        assert '"service": "duende-api"' in line
        configure_logging(log_level="INFO")
