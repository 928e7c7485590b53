"""
Tests for the heuristic engine: pattern hit counting, amount parsing, amount
tiers, base score weighting and clamping, and pattern table loading.
"""

from __future__ import annotations

import json
import math

import pytest

from backend_risklab.analysis_engine.heuristics import (
    HeuristicEngine,
    HeuristicWeights,
    amount_points,
    count_hits,
    parse_amount,
)
from backend_risklab.analysis_engine.patterns import (
    CATEGORIES,
    DEFAULT_PATTERN_TABLE,
    PatternTable,
    load_pattern_table,
    resolve_pattern_table,
)

BEC_MESSAGE = "URGENT: wire 50,000 USD immediately, keep this confidential, CEO approved"


def _single_pattern_table() -> PatternTable:
    return PatternTable(
        version="test",
        categories={
            "urgency": ("rush",),
            "authority": ("boss",),
            "secrecy": ("hush",),
            "payment": ("pay",),
            "meta": ("switch",),
        },
    )


# --- Pattern hits ---


def test_bec_sample_message_hits():
    """Sample BEC message hits urgency, authority, secrecy and payment; 50,000 USD parses to 50000."""
    result = HeuristicEngine().score(BEC_MESSAGE, "50,000 USD")
    assert result.urgency_hits >= 1
    assert result.authority_hits >= 1
    assert result.secrecy_hits >= 1
    assert result.payment_hits >= 1
    assert result.amount == 50000
    # urgent + immediately (2*8) + ceo (10) + confidential (12) + wire (7) + amount tier 20
    assert result.urgency_hits == 2
    assert result.base_score == 16 + 10 + 12 + 7 + 20


def test_repeated_pattern_counts_once():
    """Presence test per pattern, not frequency."""
    result = HeuristicEngine().score("urgent URGENT urgent!!! Urgent")
    assert result.urgency_hits == 1
    assert result.base_score == 8


def test_matching_is_case_insensitive():
    result = HeuristicEngine().score("Please Keep This Between Us and do NOT SHARE")
    assert result.secrecy_hits == 2


def test_empty_message_scores_zero():
    result = HeuristicEngine().score("", None)
    assert result.to_dict() == {
        "urgencyHits": 0,
        "authorityHits": 0,
        "secrecyHits": 0,
        "paymentHits": 0,
        "metaHits": 0,
        "amount": None,
        "baseScore": 0,
    }


def test_count_hits_distinct_patterns():
    assert count_hits("wire to new account, new account!", ("new account", "wire", "iban")) == 2


# --- Amount parsing ---


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        ("", None),
        ("not specified", None),
        (".", None),
        ("$1,234.50", 1234.5),
        ("50,000 USD", 50000.0),
        ("50k", 50.0),
        ("-500", 500.0),
        ("1.2.3", 1.2),
        (".5", 0.5),
        ("7.", 7.0),
        ("€ 9 999,99", 999999.0),
        (12000, 12000.0),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_parse_amount_never_nan_or_negative():
    for raw in ["NaN", "-inf", "infinity", "1" * 400, "--", "-.-", "0", "0.0", "$-0.01"]:
        value = parse_amount(raw)
        assert value is None or (math.isfinite(value) and value >= 0)


# --- Amount tiers ---


@pytest.mark.parametrize(
    "amount, points",
    [
        (None, 0),
        (0.0, 0),
        (4999.99, 0),
        (5000.0, 10),
        (19999.0, 10),
        (20000.0, 20),
        (99999.99, 20),
        (100000.0, 30),
        (5_000_000.0, 30),
    ],
)
def test_amount_points_tiers(amount, points):
    assert amount_points(amount) == points


# --- Base score ---


def test_base_score_weights_with_fixed_table():
    """Weighting logic against a one-pattern-per-category table."""
    engine = HeuristicEngine(table=_single_pattern_table())
    assert engine.score("rush").base_score == 8
    assert engine.score("boss").base_score == 10
    assert engine.score("hush").base_score == 12
    assert engine.score("pay").base_score == 7
    assert engine.score("switch").base_score == 9
    assert engine.score("rush boss hush pay switch", "20000").base_score == 8 + 10 + 12 + 7 + 9 + 20


def test_custom_weights():
    weights = HeuristicWeights(urgency=1, authority=1, secrecy=1, payment=1, meta=1, amount_tiers=((10.0, 5),))
    engine = HeuristicEngine(table=_single_pattern_table(), weights=weights)
    assert engine.score("rush hush", "10").base_score == 7


def test_base_score_clamped_to_100():
    everything = " ".join(p for c in CATEGORIES for p in DEFAULT_PATTERN_TABLE.patterns(c))
    result = HeuristicEngine().score(everything, "$1,000,000")
    assert result.base_score == 100


@pytest.mark.parametrize(
    "message, amount",
    [
        ("hello", None),
        (BEC_MESSAGE, "50,000 USD"),
        ("CEO CFO VP board: secret wire, bitcoin, gift cards, new account today asap", "999999"),
        ("nothing to see", "abc"),
    ],
)
def test_base_score_bounds(message, amount):
    result = HeuristicEngine().score(message, amount)
    assert 0 <= result.base_score <= 100


# --- Pattern tables ---


def test_pattern_table_requires_all_categories():
    with pytest.raises(ValueError, match="missing"):
        PatternTable(version="bad", categories={"urgency": ("now",)})


def test_pattern_table_rejects_unknown_category():
    cats = {c: ("x",) for c in CATEGORIES}
    cats["tone"] = ("please",)
    with pytest.raises(ValueError, match="unknown"):
        PatternTable(version="bad", categories=cats)


def test_pattern_table_normalizes_patterns():
    cats = {c: () for c in CATEGORIES}
    cats["urgency"] = ("  NOW ", "now", "")
    table = PatternTable(version="n", categories=cats)
    assert table.patterns("urgency") == ("now",)


def test_load_pattern_table_from_json(tmp_path):
    path = tmp_path / "patterns.json"
    doc = {"version": "9", "categories": {c: [c + "-word"] for c in CATEGORIES}}
    path.write_text(json.dumps(doc), encoding="utf-8")
    table = load_pattern_table(path)
    assert table.version == "9"
    assert table.patterns("secrecy") == ("secrecy-word",)
    result = HeuristicEngine(table=table).score("a secrecy-word here")
    assert result.secrecy_hits == 1
    assert result.base_score == 12


def test_resolve_pattern_table_falls_back_to_default(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    assert resolve_pattern_table(bad) is DEFAULT_PATTERN_TABLE
    assert resolve_pattern_table(tmp_path / "missing.json") is DEFAULT_PATTERN_TABLE
    assert resolve_pattern_table(None) is DEFAULT_PATTERN_TABLE


def test_default_table_round_trips_through_dict():
    doc = DEFAULT_PATTERN_TABLE.to_dict()
    assert doc["version"] == DEFAULT_PATTERN_TABLE.version
    assert set(doc["categories"]) == set(CATEGORIES)
