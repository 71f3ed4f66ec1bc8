# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging setup and the request logging context."""

import json
import logging

import pytest
import structlog

from zimlearn.utils.logging import (
    bind_request_context,
    bind_user,
    clear_request_context,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def clean_context():
    """Start and finish every test without bound context."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def json_logging(settings, capsys):
    """Configure JSON logging to the captured stdout, undone afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    setup_logging(settings)
    installed = [handler for handler in root.handlers if handler not in handlers]
    yield
    for handler in installed:
        root.removeHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()


def _lines(capsys) -> list[dict]:
    return [json.loads(line) for line in capsys.readouterr().out.splitlines() if line]


class TestRequestContext:
    """Tests for the request context helpers."""

    def test_bind_replaces_previous_request(self) -> None:
        """Test that binding a request drops what the last one left behind."""
        bind_request_context("old", "GET", "/health")
        bind_user("user-1")

        bind_request_context("new", "POST", "/api/auth/login")

        assert structlog.contextvars.get_contextvars() == {
            "request_id": "new",
            "method": "POST",
            "path": "/api/auth/login",
        }

    def test_bind_user(self) -> None:
        """Test that the user id joins the request context."""
        bind_request_context("r1", "GET", "/api/auth/profile")

        bind_user("user-1")

        assert structlog.contextvars.get_contextvars()["user_id"] == "user-1"

    def test_clear_removes_only_request_keys(self) -> None:
        """Test that unrelated bound values survive the request."""
        bind_request_context("r1", "GET", "/")
        bind_user("user-1")
        structlog.contextvars.bind_contextvars(worker="seed")

        clear_request_context()

        assert structlog.contextvars.get_contextvars() == {"worker": "seed"}


class TestSetupLogging:
    """Tests for setup_logging outside development."""

    def test_stdlib_record_carries_context(self, json_logging, capsys) -> None:
        """Test that stdlib loggers render JSON with the request context."""
        bind_request_context("r1", "GET", "/api/resources")
        bind_user("user-1")

        logging.getLogger("zimlearn.api.routes.resources").info("Listed %s resources", 3)

        (line,) = _lines(capsys)
        assert line["event"] == "Listed 3 resources"
        assert line["level"] == "info"
        assert line["logger"] == "zimlearn.api.routes.resources"
        assert line["request_id"] == "r1"
        assert line["user_id"] == "user-1"
        assert "timestamp" in line

    def test_structlog_fields_rendered(self, json_logging, capsys) -> None:
        """Test that structlog key-value fields reach the same handler."""
        get_logger("zimlearn.domains.resources.aggregation").info(
            "Resources fetched", source="MoPSE", count=2
        )

        (line,) = _lines(capsys)
        assert line["event"] == "Resources fetched"
        assert line["source"] == "MoPSE"
        assert line["count"] == 2

    def test_noisy_loggers_quieted(self, json_logging) -> None:
        """Test that third-party loggers only report warnings."""
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("sqlalchemy").level == logging.WARNING
