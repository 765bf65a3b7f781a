"""
Tests for structured logging helpers.
"""
from paylink.core.logging import (
    add_correlation_id,
    add_service_context,
    add_workflow_context,
    correlation_context,
    correlation_id_var,
    get_logger,
    mask_secret,
    session_id_var,
)


class TestCorrelationContext:
    """Test suite for request and session context propagation."""

    def test_sets_and_restores(self):
        correlation_id_var.set(None)

        with correlation_context("corr-1", session_id="sess-1"):
            assert correlation_id_var.get() == "corr-1"
            assert session_id_var.get() == "sess-1"

            with correlation_context(session_id="sess-2"):
                assert correlation_id_var.get() == "corr-1"
                assert session_id_var.get() == "sess-2"

            assert session_id_var.get() == "sess-1"

        assert correlation_id_var.get() is None
        assert session_id_var.get() is None

    def test_processors_add_context(self):
        with correlation_context("corr-1", session_id="sess-1"):
            event = add_correlation_id(None, "info", {"event": "x"})
            event = add_workflow_context(None, "info", event)
            event = add_service_context(None, "info", event)

        assert event["correlation_id"] == "corr-1"
        assert event["session_id"] == "sess-1"
        assert event["service"] == "paylink-orchestrator"
        assert "version" in event

    def test_explicit_session_id_wins(self):
        with correlation_context(session_id="sess-1"):
            event = add_workflow_context(None, "info", {"session_id": "other"})

        assert event["session_id"] == "other"

    def test_logger_initialization(self):
        logger = get_logger("test_logger")

        assert hasattr(logger, "info")
        assert hasattr(logger, "error")


class TestMaskSecret:
    def test_truncates(self):
        assert mask_secret("abcdefghij", visible=4) == "abcd..."

    def test_short_values_are_hidden(self):
        assert mask_secret("abc") == "***"

    def test_empty(self):
        assert mask_secret(None) == ""
