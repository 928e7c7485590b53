"""
Tests for CSV export of risk events: header, quoting, blank cells, and the CLI.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime, timedelta, timezone

from backend_risklab.ai_engine.semantic import SemanticResult
from backend_risklab.analysis_engine.blender import blend
from backend_risklab.analysis_engine.heuristics import HeuristicEngine
from backend_risklab.analysis_engine.models import RiskRequest
from backend_risklab.database.export import CSV_HEADER, event_to_row, export_events_csv, write_events_csv
from backend_risklab.database.models import RiskEvent
from backend_risklab.tools.export_events import main

T0 = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)

HEADER_LINE = (
    "createdAt,channel,actorRole,amountRaw,parsedAmount,finalScore,riskLevel,"
    "heur_urgencyHits,heur_authorityHits,heur_secrecyHits,heur_paymentHits,heur_metaHits,"
    "ai_overall_risk_score,ai_risk_level"
)


def _event(message, amount=None, ai=None, *, channel="Email", role="CFO", created_at=T0) -> RiskEvent:
    request = RiskRequest(message=message, channel=channel, actor_role=role, amount_raw=amount)
    heuristics = HeuristicEngine().score(message, amount)
    return RiskEvent.build(request, heuristics, blend(heuristics, ai), ai, created_at=created_at)


def test_header_is_plain_and_data_cells_quoted():
    out = io.StringIO()
    assert write_events_csv([], out) == 0
    assert out.getvalue() == HEADER_LINE + "\n"

    out = io.StringIO()
    write_events_csv([_event("hello")], out)
    header, row = out.getvalue().splitlines()
    assert header == HEADER_LINE
    assert row.startswith('"') and row.endswith('"')


def test_row_with_ai_verdict():
    ai = SemanticResult(overall_risk_score=85, risk_level="HIGH")
    event = _event("URGENT: wire 50,000 USD immediately, keep this confidential, CEO approved", "50,000 USD", ai)
    row = event_to_row(event)
    assert len(row) == len(CSV_HEADER)
    assert row == [
        T0.isoformat(),
        "Email",
        "CFO",
        "50,000 USD",
        "50000",
        "75",
        "HIGH",
        "2",
        "1",
        "1",
        "1",
        "0",
        "85",
        "HIGH",
    ]


def test_absent_values_are_blank_cells():
    event = _event("hello", None, None, channel=None, role=None)
    out = io.StringIO()
    write_events_csv([event], out)
    line = out.getvalue().splitlines()[1]
    assert line == f'"{T0.isoformat()}","unknown","","","","0","LOW","0","0","0","0","0","",""'


def test_fractional_scores_kept():
    event = _event("urgent", None, SemanticResult(overall_risk_score=10.5))
    row = event_to_row(event)
    assert row[CSV_HEADER.index("finalScore")] == "9.25"
    assert row[CSV_HEADER.index("ai_overall_risk_score")] == "10.5"


def test_export_events_csv_in_creation_order(event_store, tmp_path):
    event_store.append(_event("second", created_at=T0 + timedelta(minutes=5)))
    event_store.append(_event("first", "1000", created_at=T0))
    path = tmp_path / "reports" / "history.csv"

    assert export_events_csv(event_store, path) == 2

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == CSV_HEADER
    assert [r[0] for r in rows[1:]] == [T0.isoformat(), (T0 + timedelta(minutes=5)).isoformat()]
    assert rows[1][CSV_HEADER.index("parsedAmount")] == "1000"


def test_cli_exports_to_output(event_store, db_url, tmp_path, capsys):
    event_store.append(_event("confidential wire"))
    out = tmp_path / "out.csv"
    assert main(["--db-url", db_url, "--output", str(out)]) == 0
    assert "wrote 1 rows" in capsys.readouterr().out
    assert out.read_text(encoding="utf-8").splitlines()[0] == HEADER_LINE


def test_cli_empty_store_writes_header_only(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'empty.db'}"
    out = tmp_path / "empty.csv"
    assert main(["--db-url", db_url, "--output", str(out)]) == 0
    assert out.read_text(encoding="utf-8") == HEADER_LINE + "\n"


def test_cli_reads_db_url_from_env(event_store, db_url, tmp_path, monkeypatch):
    monkeypatch.setenv("RISKLAB_DB_URL", db_url)
    event_store.append(_event("hello"))
    out = tmp_path / "env.csv"
    assert main(["--output", str(out)]) == 0
    assert len(out.read_text(encoding="utf-8").splitlines()) == 2


def test_cli_without_database_fails(tmp_path):
    out = tmp_path / "none.csv"
    assert main(["--output", str(out)]) == 1
    assert not out.exists()
