"""
Test that risklab_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from risklab_logging and use the logger."""
    from backend_risklab.risklab_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_channel_context_binds_and_unbinds():
    import structlog

    from backend_risklab.risklab_logging import channel_context, get_logger

    with channel_context("Email"):
        assert structlog.contextvars.get_contextvars()["channel"] == "Email"
        get_logger("test").info("test_channel_message", risk_level="LOW")
    assert "channel" not in structlog.contextvars.get_contextvars()
