"""
Blend heuristic and semantic scores into a final score and risk level.

Formula: final = base_score when no usable semantic score, otherwise the
unweighted mean (base_score + overall_risk_score) / 2; clamped 0–100.
Risk levels: < 40 → LOW; 40–70 → MEDIUM; >= 70 → HIGH (lower edge inclusive).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from backend_risklab.analysis_engine.models import BlendResult, HeuristicResult, RiskLevel

if TYPE_CHECKING:
    from backend_risklab.ai_engine.semantic import SemanticResult

MIN_SCORE = 0.0
MAX_SCORE = 100.0
MEDIUM_THRESHOLD = 40.0
HIGH_THRESHOLD = 70.0


def clamp_score(score: float) -> float:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def classify_score(score: float) -> RiskLevel:
    """score >= 70 → HIGH; 40 <= score < 70 → MEDIUM; else LOW. Applied to the clamped value."""
    s = clamp_score(score)
    if s >= HIGH_THRESHOLD:
        return RiskLevel.HIGH
    if s >= MEDIUM_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def blend(heuristics: HeuristicResult, semantic: SemanticResult | None) -> BlendResult:
    """Combine the heuristic base score with the classifier score when it is numeric."""
    final_score = float(heuristics.base_score)
    if semantic is not None and semantic.overall_risk_score is not None:
        final_score = (heuristics.base_score + semantic.overall_risk_score) / 2
    final_score = clamp_score(final_score)
    return BlendResult(final_score=final_score, risk_level=classify_score(final_score))
