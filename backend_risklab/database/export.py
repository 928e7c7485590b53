"""
CSV export of persisted risk events for external reporting (Tableau, sheets).

One row per event in creation order. The header row is plain comma-joined
names; every data cell is quoted and absent values are written as empty
strings. The header row is always written, even for an empty store.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Iterable

from backend_risklab.database.event_store import EventStore
from backend_risklab.database.models import RiskEvent
from backend_risklab.risklab_logging import get_logger

logger = get_logger(__name__)

CSV_HEADER = [
    "createdAt",
    "channel",
    "actorRole",
    "amountRaw",
    "parsedAmount",
    "finalScore",
    "riskLevel",
    "heur_urgencyHits",
    "heur_authorityHits",
    "heur_secrecyHits",
    "heur_paymentHits",
    "heur_metaHits",
    "ai_overall_risk_score",
    "ai_risk_level",
]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def event_to_row(event: RiskEvent) -> list[str]:
    h = event.heuristics
    ai = event.ai
    return [
        _cell(event.created_at.isoformat()),
        _cell(event.channel),
        _cell(event.actor_role),
        _cell(event.amount_raw),
        _cell(event.parsed_amount),
        _cell(event.final_score),
        _cell(event.risk_level.value),
        _cell(h.urgency_hits),
        _cell(h.authority_hits),
        _cell(h.secrecy_hits),
        _cell(h.payment_hits),
        _cell(h.meta_hits),
        _cell(ai.overall_risk_score if ai is not None else None),
        _cell(ai.risk_level if ai is not None else None),
    ]


def write_events_csv(events: Iterable[RiskEvent], out: io.TextIOBase) -> int:
    """Write header plus one row per event to an open text stream. Returns rows written."""
    csv.writer(out, lineterminator="\n").writerow(CSV_HEADER)
    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    count = 0
    for event in events:
        writer.writerow(event_to_row(event))
        count += 1
    return count


def export_events_csv(store: EventStore, output_path: Path | str) -> int:
    """Export every stored event to output_path. Returns number of event rows."""
    output_path = Path(output_path)
    events = store.iter_events()
    logger.info("export_events_found", count=len(events))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        n = write_events_csv(events, f)
    logger.info("export_events_done", path=str(output_path), rows=n)
    return n
