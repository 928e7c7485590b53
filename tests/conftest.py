"""
Pytest fixtures for RiskLab tests. Uses a temporary SQLite DB for the event store
and a stub classifier so no test reaches the network.
"""

from __future__ import annotations

import pytest

from backend_risklab.ai_engine.semantic import SemanticResult
from backend_risklab.analysis_engine.models import RiskRequest


class StubClassifier:
    """Stands in for SemanticClassifier: returns a fixed result or raises."""

    def __init__(self, result: SemanticResult | None = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[RiskRequest] = []
        self.configured = True

    def classify(self, request: RiskRequest) -> SemanticResult | None:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer credentials and DB URLs out of tests."""
    for name in (
        "GROQ_API_KEY",
        "GROQ_MODEL",
        "GROQ_BASE_URL",
        "RISKLAB_DB_URL",
        "DATABASE_URL",
        "RISKLAB_PATTERNS_PATH",
        "CLASSIFIER_TIMEOUT_SEC",
        "SUMMARY_RECENT_LIMIT",
        "EVENT_WRITER_WORKERS",
        "API_HOST",
        "CORS_ORIGINS",
        "API_PORT",
        "PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("backend_risklab.config.env.load_risklab_env", lambda: None)
    monkeypatch.setattr("backend_risklab.config.settings.load_risklab_env", lambda: None)


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'risklab.db'}"


@pytest.fixture
def event_store(db_url):
    """Fresh SQLite-backed event store with schema created."""
    from backend_risklab.database.event_store import SQLAlchemyEventStore

    store = SQLAlchemyEventStore(db_url)
    store.init_schema()
    yield store
    store.close()


@pytest.fixture
def stub_classifier():
    return StubClassifier()


@pytest.fixture
def pipeline(event_store, stub_classifier):
    """RiskPipeline with the stub classifier and temp store."""
    from backend_risklab.analysis_engine.pipeline import RiskPipeline

    p = RiskPipeline(classifier=stub_classifier, store=event_store)
    yield p
    p.flush()
    if p.writer is not None:
        p.writer.close()


@pytest.fixture
def client(pipeline):
    """FastAPI TestClient wired to the test pipeline."""
    from fastapi.testclient import TestClient

    from backend_risklab.api_server.server import app, get_pipeline

    app.dependency_overrides[get_pipeline] = lambda: pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()
