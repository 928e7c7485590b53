"""
Database layer: append-only risk event store, aggregates, and CSV export.

SQLAlchemy-backed; SQLite locally, PostgreSQL via RISKLAB_DB_URL.
"""

from backend_risklab.database.event_store import (
    EventStore,
    EventSummary,
    LevelCount,
    SQLAlchemyEventStore,
    build_event_store,
)
from backend_risklab.database.models import RiskEvent, RiskEventRow

__all__ = [
    "EventStore",
    "EventSummary",
    "LevelCount",
    "SQLAlchemyEventStore",
    "build_event_store",
    "RiskEvent",
    "RiskEventRow",
]
