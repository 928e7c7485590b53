"""
Analysis engine package: rule-based heuristics and score blending.

Deterministic keyword/amount heuristics over a versioned pattern table, plus
the blender that merges heuristic and classifier scores into a final score
and risk level. The request orchestrator lives in analysis_engine.pipeline.
"""

from backend_risklab.analysis_engine.blender import blend, clamp_score, classify_score
from backend_risklab.analysis_engine.heuristics import (
    DEFAULT_WEIGHTS,
    HeuristicEngine,
    HeuristicWeights,
    amount_points,
    parse_amount,
)
from backend_risklab.analysis_engine.models import (
    BlendResult,
    HeuristicResult,
    RiskLevel,
    RiskRequest,
)
from backend_risklab.analysis_engine.patterns import (
    CATEGORIES,
    DEFAULT_PATTERN_TABLE,
    PatternTable,
    load_pattern_table,
    resolve_pattern_table,
)

__all__ = [
    "blend",
    "clamp_score",
    "classify_score",
    "DEFAULT_WEIGHTS",
    "HeuristicEngine",
    "HeuristicWeights",
    "amount_points",
    "parse_amount",
    "BlendResult",
    "HeuristicResult",
    "RiskLevel",
    "RiskRequest",
    "CATEGORIES",
    "DEFAULT_PATTERN_TABLE",
    "PatternTable",
    "load_pattern_table",
    "resolve_pattern_table",
]
