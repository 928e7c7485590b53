"""
Risk event records: the immutable domain record and its SQLAlchemy row.

One RiskEvent per scored request. Events are append-only: never updated,
deduplicated, or deleted by the application.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base

from backend_risklab.ai_engine.semantic import SemanticResult
from backend_risklab.analysis_engine.models import (
    BlendResult,
    HeuristicResult,
    RiskLevel,
    RiskRequest,
)

Base = declarative_base()

DEFAULT_CHANNEL = "unknown"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo; stored timestamps are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _finite_or_none(value: float | None) -> float | None:
    if value is None:
        return None
    value = float(value)
    return value if math.isfinite(value) and value >= 0 else None


@dataclass(frozen=True)
class RiskEvent:
    """Durable record of one scoring request and its outcome."""

    channel: str
    actor_role: str
    amount_raw: str
    parsed_amount: float | None
    final_score: float
    risk_level: RiskLevel
    heuristics: HeuristicResult
    ai: SemanticResult | None
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def build(
        cls,
        request: RiskRequest,
        heuristics: HeuristicResult,
        outcome: BlendResult,
        ai: SemanticResult | None,
        *,
        created_at: datetime | None = None,
    ) -> RiskEvent:
        """Assemble the record; missing channel -> 'unknown', missing role/amount -> ''."""
        return cls(
            channel=request.channel or DEFAULT_CHANNEL,
            actor_role=request.actor_role or "",
            amount_raw=request.amount_raw or "",
            parsed_amount=_finite_or_none(heuristics.amount),
            final_score=outcome.final_score,
            risk_level=outcome.risk_level,
            heuristics=heuristics,
            ai=ai,
            created_at=_as_utc(created_at) if created_at else utc_now(),
        )


class RiskEventRow(Base):
    """
    risk_events table: one append-only row per scored request.
    Heuristics and classifier verdict are stored as JSON text.
    """

    __tablename__ = "risk_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    channel = Column(Text, nullable=False, default=DEFAULT_CHANNEL)
    actor_role = Column(Text, nullable=False, default="")
    amount_raw = Column(Text, nullable=False, default="")
    parsed_amount = Column(Float, nullable=True)
    final_score = Column(Float, nullable=False)
    risk_level = Column(String(16), nullable=False, index=True)
    heuristics_json = Column(Text, nullable=False)
    ai_json = Column(Text, nullable=True)

    @classmethod
    def from_event(cls, event: RiskEvent) -> RiskEventRow:
        return cls(
            created_at=event.created_at,
            channel=event.channel,
            actor_role=event.actor_role,
            amount_raw=event.amount_raw,
            parsed_amount=event.parsed_amount,
            final_score=event.final_score,
            risk_level=event.risk_level.value,
            heuristics_json=json.dumps(event.heuristics.to_dict()),
            ai_json=json.dumps(event.ai.to_dict()) if event.ai is not None else None,
        )

    def to_event(self) -> RiskEvent:
        ai = SemanticResult.model_validate(json.loads(self.ai_json)) if self.ai_json else None
        return RiskEvent(
            channel=self.channel or DEFAULT_CHANNEL,
            actor_role=self.actor_role or "",
            amount_raw=self.amount_raw or "",
            parsed_amount=self.parsed_amount,
            final_score=float(self.final_score),
            risk_level=RiskLevel(self.risk_level),
            heuristics=HeuristicResult.from_dict(json.loads(self.heuristics_json)),
            ai=ai,
            created_at=_as_utc(self.created_at),
        )

    def to_recent_dict(self) -> dict[str, Any]:
        return {
            "finalScore": self.final_score,
            "riskLevel": self.risk_level,
            "parsedAmount": self.parsed_amount,
            "createdAt": _as_utc(self.created_at).isoformat(),
        }
