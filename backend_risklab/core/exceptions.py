"""
Application-level exceptions.

Only ValidationError reaches API callers. ClassifierError and PersistenceError
are raised inside their components and recovered by the pipeline: the request
falls back to heuristic-only scoring or is answered without persistence.
"""

from __future__ import annotations


class RiskLabError(Exception):
    """Base class for all Backend RiskLab errors."""

    code = "risklab_error"


class ValidationError(RiskLabError):
    """Scoring request rejected before any scoring ran (e.g. empty message)."""

    code = "validation_error"


class ClassifierError(RiskLabError):
    """Semantic classifier unavailable, timed out, rejected auth, or replied with garbage."""

    code = "classifier_error"


class PersistenceError(RiskLabError):
    """Event store unreachable or write rejected."""

    code = "persistence_error"


class StoreNotConfigured(RiskLabError):
    """No event store configured; historical queries are unavailable."""

    code = "store_not_configured"
