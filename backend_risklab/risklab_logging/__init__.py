"""
Structured logging for Backend RiskLab.

JSON logs with timestamp, level, event_type and per-call fields.
"""

from backend_risklab.risklab_logging.logger import channel_context, get_logger

__all__ = ["channel_context", "get_logger"]
