"""
Rule-based heuristic scoring for payment messages.

Counts which keyword patterns of each category appear in the message, parses
the requested amount, and combines both into a base score (0–100). Fully
deterministic and explainable; no external calls. Weights encode priority:
secrecy/bypass language highest, then authority impersonation and amount,
then urgency and payment-method mentions.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from backend_risklab.analysis_engine.models import HeuristicResult
from backend_risklab.analysis_engine.patterns import (
    CATEGORY_AUTHORITY,
    CATEGORY_META,
    CATEGORY_PAYMENT,
    CATEGORY_SECRECY,
    CATEGORY_URGENCY,
    DEFAULT_PATTERN_TABLE,
    PatternTable,
)
from backend_risklab.risklab_logging import get_logger

logger = get_logger(__name__)

MAX_BASE_SCORE = 100

_NON_AMOUNT_CHARS = re.compile(r"[^0-9.]")
# Leading float literal of the cleaned string ("1.2.3" -> "1.2", "5." -> "5.").
_LEADING_FLOAT = re.compile(r"\d+(?:\.\d*)?|\.\d+")


@dataclass(frozen=True)
class HeuristicWeights:
    """Points per pattern hit and amount tiers (threshold, points), highest first."""

    urgency: int = 8
    authority: int = 10
    secrecy: int = 12
    payment: int = 7
    meta: int = 9
    amount_tiers: tuple[tuple[float, int], ...] = (
        (100_000.0, 30),
        (20_000.0, 20),
        (5_000.0, 10),
    )


DEFAULT_WEIGHTS = HeuristicWeights()


def parse_amount(amount_raw: object) -> float | None:
    """
    Extract a magnitude from a free-form amount ("$50,000", "50k USD", "12.5 BTC").

    Drops every character that is not a digit or '.', then reads the leading
    number. Returns None when nothing parsable remains. No currency or unit
    interpretation ("50k" -> 50.0). Never returns NaN, infinity, or a negative.
    """
    if amount_raw is None:
        return None
    cleaned = _NON_AMOUNT_CHARS.sub("", str(amount_raw))
    if not cleaned:
        return None
    m = _LEADING_FLOAT.match(cleaned)
    if not m:
        return None
    value = float(m.group(0))
    if not math.isfinite(value):
        return None
    return value


def amount_points(amount: float | None, weights: HeuristicWeights = DEFAULT_WEIGHTS) -> int:
    """Points for the requested amount: first tier whose threshold is met; 0 when None."""
    if amount is None:
        return 0
    for threshold, points in weights.amount_tiers:
        if amount >= threshold:
            return points
    return 0


def count_hits(text: str, patterns: tuple[str, ...]) -> int:
    """Number of distinct patterns that occur at least once in text (presence, not frequency)."""
    return sum(1 for p in patterns if p in text)


class HeuristicEngine:
    """
    Keyword and amount heuristics over an injected pattern table.

    score() is pure and total: any message and amount produce a result.
    """

    def __init__(
        self,
        table: PatternTable = DEFAULT_PATTERN_TABLE,
        weights: HeuristicWeights = DEFAULT_WEIGHTS,
    ) -> None:
        self.table = table
        self.weights = weights

    def score(self, message: str | None, amount_raw: str | None = None) -> HeuristicResult:
        text = (message or "").lower()
        urgency = count_hits(text, self.table.patterns(CATEGORY_URGENCY))
        authority = count_hits(text, self.table.patterns(CATEGORY_AUTHORITY))
        secrecy = count_hits(text, self.table.patterns(CATEGORY_SECRECY))
        payment = count_hits(text, self.table.patterns(CATEGORY_PAYMENT))
        meta = count_hits(text, self.table.patterns(CATEGORY_META))

        amount = parse_amount(amount_raw)
        w = self.weights
        raw_score = (
            urgency * w.urgency
            + authority * w.authority
            + secrecy * w.secrecy
            + payment * w.payment
            + meta * w.meta
            + amount_points(amount, w)
        )
        result = HeuristicResult(
            urgency_hits=urgency,
            authority_hits=authority,
            secrecy_hits=secrecy,
            payment_hits=payment,
            meta_hits=meta,
            amount=amount,
            base_score=min(MAX_BASE_SCORE, raw_score),
        )
        logger.debug(
            "heuristics_scored",
            table_version=self.table.version,
            base_score=result.base_score,
            hits=[urgency, authority, secrecy, payment, meta],
            amount=amount,
        )
        return result
