"""
Data models for the risk-scoring pipeline.

RiskRequest is the ephemeral input of one scoring call; HeuristicResult and
BlendResult are immutable outputs of the heuristic engine and the blender.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class RiskRequest:
    """
    One payment-related message submitted for scoring.

    Only message is required; channel, actor_role and amount_raw are free-form
    labels supplied by the caller and may be None.
    """

    message: str
    channel: str | None = None
    actor_role: str | None = None
    amount_raw: str | None = None


@dataclass(frozen=True)
class HeuristicResult:
    """
    Rule-based result for one message.

    Hit counts are the number of distinct patterns per category found in the
    message. amount is the parsed requested amount (None when absent or
    unparsable, never NaN). base_score is clamped to [0, 100].
    """

    urgency_hits: int
    authority_hits: int
    secrecy_hits: int
    payment_hits: int
    meta_hits: int
    amount: float | None
    base_score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "urgencyHits": self.urgency_hits,
            "authorityHits": self.authority_hits,
            "secrecyHits": self.secrecy_hits,
            "paymentHits": self.payment_hits,
            "metaHits": self.meta_hits,
            "amount": self.amount,
            "baseScore": self.base_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HeuristicResult:
        amount = data.get("amount")
        return cls(
            urgency_hits=int(data.get("urgencyHits") or 0),
            authority_hits=int(data.get("authorityHits") or 0),
            secrecy_hits=int(data.get("secrecyHits") or 0),
            payment_hits=int(data.get("paymentHits") or 0),
            meta_hits=int(data.get("metaHits") or 0),
            amount=float(amount) if amount is not None else None,
            base_score=int(data.get("baseScore") or 0),
        )


@dataclass(frozen=True)
class BlendResult:
    final_score: float
    risk_level: RiskLevel
