"""
AI engine package: external semantic classifier for payment messages.

Builds the classifier prompt, calls the chat-completions endpoint, and
sanitizes the reply into an optional SemanticResult.
"""

from backend_risklab.ai_engine.semantic import (
    FactorScores,
    SemanticClassifier,
    SemanticResult,
    decode_reply,
    parse_reply,
    sanitize_reply,
)

__all__ = [
    "FactorScores",
    "SemanticClassifier",
    "SemanticResult",
    "decode_reply",
    "parse_reply",
    "sanitize_reply",
]
