"""
Event store: append-only persistence of risk events plus aggregate reads.

RISKLAB_DB_URL (or DATABASE_URL) selects any SQLAlchemy URL: SQLite for local
use, PostgreSQL in production. With no URL the store is "not configured" and
build_event_store() returns None; the pipeline then scores without persisting.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

from sqlalchemy import create_engine, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backend_risklab.analysis_engine.models import RiskLevel
from backend_risklab.config import Settings
from backend_risklab.config.env import mask_url
from backend_risklab.core.exceptions import PersistenceError
from backend_risklab.database.models import Base, RiskEvent, RiskEventRow
from backend_risklab.risklab_logging import get_logger

logger = get_logger(__name__)

DEFAULT_RECENT_LIMIT = 30
_LEVEL_ORDER = {level.value: i for i, level in enumerate(RiskLevel)}


@dataclass(frozen=True)
class LevelCount:
    level: str
    count: int


@dataclass(frozen=True)
class EventSummary:
    """
    Aggregate view for reporting: total events, counts per level (only levels
    that occur), and the most recent events newest first.
    """

    total: int
    by_level: list[LevelCount] = field(default_factory=list)
    recent: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "byLevel": [{"level": c.level, "count": c.count} for c in self.by_level],
            "recent": list(self.recent),
        }


class EventStore(ABC):
    """Abstract interface for risk event persistence."""

    @abstractmethod
    def append(self, event: RiskEvent) -> int:
        """Persist one event. Returns row id. Raises PersistenceError on failure."""
        ...

    @abstractmethod
    def summarize(self, recent_limit: int = DEFAULT_RECENT_LIMIT) -> EventSummary:
        """Total count, counts by risk level, and the most recent events."""
        ...

    @abstractmethod
    def iter_events(self) -> list[RiskEvent]:
        """All events in creation order (oldest first)."""
        ...

    def close(self) -> None:
        """Release connections. Default: nothing to release."""


class SQLAlchemyEventStore(EventStore):
    """EventStore on a single risk_events table via SQLAlchemy."""

    def __init__(self, url: str) -> None:
        if not url:
            raise ValueError("database url must be non-empty")
        self.url = url
        connect_args: dict[str, Any] = {}
        engine_kwargs: dict[str, Any] = {"pool_pre_ping": True}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise each thread sees its own empty DB.
                engine_kwargs["poolclass"] = StaticPool
        self._engine = create_engine(url, connect_args=connect_args, **engine_kwargs)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        """Commits on success, rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def init_schema(self) -> None:
        """Create tables if they do not exist. Safe to call on every startup."""
        try:
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"event store schema init failed: {e}") from e
        logger.info("event_store_init_schema", url=mask_url(self.url))

    def append(self, event: RiskEvent) -> int:
        try:
            with self._session_scope() as session:
                row = RiskEventRow.from_event(event)
                session.add(row)
                session.flush()
                row_id = row.id
        except SQLAlchemyError as e:
            raise PersistenceError(f"risk event append failed: {e}") from e
        logger.debug(
            "risk_event_appended",
            id=row_id,
            risk_level=event.risk_level.value,
            final_score=event.final_score,
        )
        return row_id

    def summarize(self, recent_limit: int = DEFAULT_RECENT_LIMIT) -> EventSummary:
        try:
            with self._session_scope() as session:
                total = session.query(func.count(RiskEventRow.id)).scalar() or 0
                grouped = (
                    session.query(RiskEventRow.risk_level, func.count(RiskEventRow.id))
                    .group_by(RiskEventRow.risk_level)
                    .all()
                )
                recent_rows = (
                    session.query(RiskEventRow)
                    .order_by(RiskEventRow.created_at.desc(), RiskEventRow.id.desc())
                    .limit(max(0, recent_limit))
                    .all()
                )
                recent = [r.to_recent_dict() for r in recent_rows]
        except SQLAlchemyError as e:
            raise PersistenceError(f"risk event summary failed: {e}") from e

        by_level = sorted(
            (LevelCount(level=str(level), count=int(count)) for level, count in grouped if count),
            key=lambda c: _LEVEL_ORDER.get(c.level, len(_LEVEL_ORDER)),
        )
        return EventSummary(total=int(total), by_level=by_level, recent=recent)

    def iter_events(self) -> list[RiskEvent]:
        try:
            with self._session_scope() as session:
                rows = (
                    session.query(RiskEventRow)
                    .order_by(RiskEventRow.created_at.asc(), RiskEventRow.id.asc())
                    .all()
                )
                return [r.to_event() for r in rows]
        except SQLAlchemyError as e:
            raise PersistenceError(f"risk event read failed: {e}") from e

    def close(self) -> None:
        self._engine.dispose()


def build_event_store(settings: Settings) -> EventStore | None:
    """
    Return a ready store for settings.database_url, or None when persistence is
    not configured. Schema init failures are logged; the store is still
    returned so later writes fail (and are logged) individually.
    """
    if not settings.store_configured:
        logger.warning("event_store_not_configured", message="RISKLAB_DB_URL is not set; risk events will not be persisted")
        return None
    try:
        store = SQLAlchemyEventStore(settings.database_url)
    except (SQLAlchemyError, ImportError, ValueError) as e:
        logger.error("event_store_create_failed", url=mask_url(settings.database_url), error=str(e))
        return None
    try:
        store.init_schema()
    except PersistenceError as e:
        logger.error("event_store_init_failed", url=mask_url(settings.database_url), error=str(e))
    return store
