"""
Risk pipeline: sequences one scoring request end to end.

validate → heuristics → semantic classifier (failure tolerated) → blend →
background persistence (failure tolerated) → assessment.

Fail-open: after validation nothing is allowed to turn a classifier or
persistence fault into a caller-visible error; the caller always gets a risk
opinion, heuristic-only when the classifier is unavailable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from backend_risklab.agent_worker.event_writer import EventWriter
from backend_risklab.ai_engine.semantic import SemanticClassifier, SemanticResult
from backend_risklab.analysis_engine.blender import blend
from backend_risklab.analysis_engine.heuristics import HeuristicEngine
from backend_risklab.analysis_engine.models import HeuristicResult, RiskLevel, RiskRequest
from backend_risklab.analysis_engine.patterns import resolve_pattern_table
from backend_risklab.config import Settings
from backend_risklab.core.exceptions import StoreNotConfigured, ValidationError
from backend_risklab.database.event_store import DEFAULT_RECENT_LIMIT, EventStore, EventSummary, build_event_store
from backend_risklab.database.models import RiskEvent
from backend_risklab.risklab_logging import channel_context, get_logger

logger = get_logger(__name__)

MESSAGE_REQUIRED = "Message text is required."


@dataclass(frozen=True)
class RiskAssessment:
    """Response of one scoring call."""

    final_score: float
    level: RiskLevel
    heuristics: HeuristicResult
    ai: SemanticResult | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "finalScore": self.final_score,
            "level": self.level.value,
            "heuristics": self.heuristics.to_dict(),
            "ai": self.ai.to_dict() if self.ai is not None else None,
        }


def validate_request(request: RiskRequest) -> None:
    """Raise ValidationError when the message is missing or blank."""
    if not request.message or not request.message.strip():
        raise ValidationError(MESSAGE_REQUIRED)


class RiskPipeline:
    """
    Scores RiskRequests. classifier and store are optional collaborators:
    without a classifier every score is heuristic-only, without a store
    nothing is persisted and summarize() raises StoreNotConfigured.
    """

    def __init__(
        self,
        engine: HeuristicEngine | None = None,
        classifier: SemanticClassifier | None = None,
        store: EventStore | None = None,
        writer: EventWriter | None = None,
        *,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
    ) -> None:
        self.engine = engine or HeuristicEngine()
        self.classifier = classifier
        self.store = store
        if writer is None and store is not None:
            writer = EventWriter(store)
        self.writer = writer
        self.recent_limit = recent_limit

    @classmethod
    def from_settings(cls, settings: Settings) -> RiskPipeline:
        engine = HeuristicEngine(table=resolve_pattern_table(settings.patterns_path))
        classifier = SemanticClassifier.from_settings(settings)
        if not classifier.configured:
            logger.warning("classifier_not_configured", message="GROQ_API_KEY is not set; AI analysis will be skipped")
        store = build_event_store(settings)
        writer = EventWriter(store, max_workers=settings.event_writer_workers) if store is not None else None
        return cls(
            engine=engine,
            classifier=classifier,
            store=store,
            writer=writer,
            recent_limit=settings.summary_recent_limit,
        )

    def _classify_safe(self, request: RiskRequest) -> SemanticResult | None:
        if self.classifier is None:
            return None
        try:
            return self.classifier.classify(request)
        except Exception as e:
            logger.error("classifier_unexpected_error", error=str(e), exc_info=True)
            return None

    def _persist_safe(self, event: RiskEvent) -> None:
        if self.writer is None:
            return
        try:
            self.writer.submit(event)
        except Exception as e:
            logger.error("risk_event_submit_unexpected_error", error=str(e), exc_info=True)

    def analyze(self, request: RiskRequest) -> RiskAssessment:
        """Score one request. Raises ValidationError only; every later stage fails open."""
        validate_request(request)
        with channel_context(request.channel or "unknown"):
            heuristics = self.engine.score(request.message, request.amount_raw)
            ai = self._classify_safe(request)
            outcome = blend(heuristics, ai)

            self._persist_safe(RiskEvent.build(request, heuristics, outcome, ai))

            logger.info(
                "risk_scored",
                final_score=outcome.final_score,
                risk_level=outcome.risk_level.value,
                base_score=heuristics.base_score,
                ai_available=ai is not None,
                ai_score=ai.overall_risk_score if ai is not None else None,
            )
        return RiskAssessment(
            final_score=outcome.final_score,
            level=outcome.risk_level,
            heuristics=heuristics,
            ai=ai,
        )

    def summarize(self, recent_limit: int | None = None) -> EventSummary:
        """Historical summary. Raises StoreNotConfigured or PersistenceError."""
        if self.store is None:
            raise StoreNotConfigured("Event store not configured; no historical data.")
        return self.store.summarize(self.recent_limit if recent_limit is None else recent_limit)

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for background writes submitted so far."""
        if self.writer is None:
            return True
        return self.writer.flush(timeout=timeout)

    def close(self) -> None:
        if self.writer is not None:
            self.writer.close()
        if self.store is not None:
            self.store.close()
