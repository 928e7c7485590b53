"""
Keyword pattern tables for the heuristic engine.

Patterns are configuration, not behavior: the engine receives a PatternTable
and only counts which of its patterns appear. Tables carry a version that is
logged with every heuristic score. A table can be loaded from a JSON file of
the form

    {"version": "2", "categories": {"urgency": ["urgent", ...], ...}}

and must define exactly the five categories in CATEGORIES.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from backend_risklab.risklab_logging import get_logger

logger = get_logger(__name__)

CATEGORY_URGENCY = "urgency"
CATEGORY_AUTHORITY = "authority"
CATEGORY_SECRECY = "secrecy"
CATEGORY_PAYMENT = "payment"
CATEGORY_META = "meta"

CATEGORIES = (
    CATEGORY_URGENCY,
    CATEGORY_AUTHORITY,
    CATEGORY_SECRECY,
    CATEGORY_PAYMENT,
    CATEGORY_META,
)


@dataclass(frozen=True)
class PatternTable:
    """Versioned mapping of category -> lower-case substring patterns."""

    version: str
    categories: Mapping[str, tuple[str, ...]]

    def __post_init__(self) -> None:
        missing = [c for c in CATEGORIES if c not in self.categories]
        unknown = [c for c in self.categories if c not in CATEGORIES]
        if missing or unknown:
            raise ValueError(
                f"pattern table {self.version!r}: missing={missing} unknown={unknown}"
            )
        normalized = {
            name: tuple(dict.fromkeys(p.strip().lower() for p in patterns if p and p.strip()))
            for name, patterns in self.categories.items()
        }
        object.__setattr__(self, "categories", MappingProxyType(normalized))

    def patterns(self, category: str) -> tuple[str, ...]:
        return self.categories[category]

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "categories": {name: list(self.categories[name]) for name in CATEGORIES},
        }


DEFAULT_PATTERN_TABLE = PatternTable(
    version="2",
    categories={
        CATEGORY_URGENCY: (
            "urgent",
            "immediately",
            "asap",
            "right now",
            "today",
            "within the hour",
            "cannot wait",
            "do not delay",
        ),
        CATEGORY_AUTHORITY: (
            "ceo",
            "cfo",
            "director",
            "vp",
            "vice president",
            "chairman",
            "board",
            "executive",
            "senior manager",
        ),
        CATEGORY_SECRECY: (
            "confidential",
            "do not tell",
            "do not share",
            "keep this between us",
            "secret",
            "off the record",
        ),
        # "wire" covers both "wire transfer" and bare "wire $X" requests.
        CATEGORY_PAYMENT: (
            "wire",
            "bank transfer",
            "account number",
            "routing number",
            "swift",
            "iban",
            "crypto",
            "bitcoin",
            "gift cards",
            "prepaid cards",
        ),
        CATEGORY_META: (
            "new account",
            "change of bank details",
            "different account",
            "overdue invoice",
            "update beneficiary",
        ),
    },
)


def pattern_table_from_dict(data: dict[str, Any]) -> PatternTable:
    """Build a table from parsed JSON. Raises ValueError on a malformed document."""
    if not isinstance(data, dict):
        raise ValueError("pattern table must be a JSON object")
    categories = data.get("categories")
    if not isinstance(categories, dict):
        raise ValueError("pattern table needs a 'categories' object")
    parsed: dict[str, tuple[str, ...]] = {}
    for name, patterns in categories.items():
        if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
            raise ValueError(f"category {name!r} must be a list of strings")
        parsed[str(name)] = tuple(patterns)
    return PatternTable(version=str(data.get("version") or "custom"), categories=parsed)


def load_pattern_table(path: Path | str) -> PatternTable:
    """Load a pattern table from a JSON file. Raises OSError/ValueError on failure."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    table = pattern_table_from_dict(data)
    logger.info(
        "pattern_table_loaded",
        path=str(path),
        version=table.version,
        pattern_count=sum(len(table.patterns(c)) for c in CATEGORIES),
    )
    return table


def resolve_pattern_table(path: Path | str | None) -> PatternTable:
    """Return the table at path, or the default table when path is None or unreadable."""
    if path is None:
        return DEFAULT_PATTERN_TABLE
    try:
        return load_pattern_table(path)
    except (OSError, ValueError) as e:
        logger.warning("pattern_table_load_failed", path=str(path), error=str(e))
        return DEFAULT_PATTERN_TABLE
