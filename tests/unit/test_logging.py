# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging setup and log context."""

import logging

import pytest
import structlog

from src.utils.logging import QUIET_LOGGERS, log_context, setup_logging


class TestLogContext:
    """Tests for log_context()."""

    def test_values_bound_inside_block(self) -> None:
        """Test that values are visible to log calls in the block."""
        with log_context(event_id="evt-1", event_type="admissions.lead.created"):
            bound = structlog.contextvars.get_contextvars()

        assert bound["event_id"] == "evt-1"
        assert bound["event_type"] == "admissions.lead.created"

    def test_outer_values_restored(self) -> None:
        """Test that nesting restores the enclosing event id."""
        structlog.contextvars.clear_contextvars()
        with log_context(event_id="outer"):
            with log_context(event_id="inner"):
                assert structlog.contextvars.get_contextvars()["event_id"] == "inner"
            assert structlog.contextvars.get_contextvars()["event_id"] == "outer"

        assert "event_id" not in structlog.contextvars.get_contextvars()


class TestSetupLogging:
    """Tests for setup_logging()."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        """Restore structlog defaults after each test."""
        yield
        structlog.reset_defaults()

    def test_quiets_delivery_libraries(self, settings) -> None:
        """Test that transport libraries only log warnings."""
        setup_logging(settings)

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_production_logs_json(self, settings) -> None:
        """Test the renderer outside development."""
        production = settings.model_copy(update={"environment": "staging", "debug": False})

        setup_logging(production)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
