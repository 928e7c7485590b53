"""
FastAPI server: scoring and history endpoints over the risk pipeline.

POST /api/analyze scores one message; GET /api/events-summary returns counts by
level and the most recent events; GET /health reports which collaborators are
configured. Config via env (GROQ_API_KEY, RISKLAB_DB_URL, ...).
"""

from __future__ import annotations

import functools
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend_risklab import __version__
from backend_risklab.analysis_engine.models import RiskRequest
from backend_risklab.analysis_engine.pipeline import RiskPipeline
from backend_risklab.config import get_settings
from backend_risklab.core.exceptions import PersistenceError, StoreNotConfigured, ValidationError
from backend_risklab.risklab_logging import get_logger

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Dependency
# -----------------------------------------------------------------------------


@functools.lru_cache(maxsize=1)
def get_pipeline() -> RiskPipeline:
    """Dependency: one pipeline per process, built from env settings on first use."""
    return RiskPipeline.from_settings(get_settings())


# -----------------------------------------------------------------------------
# Request models
# -----------------------------------------------------------------------------


def _as_text(value: str | int | float | None) -> str | None:
    return None if value is None else str(value)


class AnalyzeRequest(BaseModel):
    """POST /api/analyze body. message is checked by the pipeline, not here, so blanks get the same 400."""

    message: str | None = Field(None, description="Payment-related message text")
    channel: str | int | float | None = Field(None, description="Email / Voice / Chat / ...")
    actorRole: str | int | float | None = Field(None, description="Claimed sender role")
    amount: str | int | float | None = Field(None, description="Requested amount, any format")

    def to_risk_request(self) -> RiskRequest:
        return RiskRequest(
            message=self.message or "",
            channel=_as_text(self.channel),
            actor_role=_as_text(self.actorRole),
            amount_raw=_as_text(self.amount),
        )


# -----------------------------------------------------------------------------
# Lifespan: drain background event writes on shutdown
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("api_starting", version=__version__)
    yield
    if get_pipeline.cache_info().currsize:
        get_pipeline().close()
        get_pipeline.cache_clear()
    logger.info("api_stopped")


app = FastAPI(
    title="Backend RiskLab API",
    description="Payment fraud risk scoring: heuristics + semantic classifier, with event history.",
    version=__version__,
    lifespan=lifespan,
)

# Allowed origins come from CORS_ORIGINS (default: any origin).
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


@app.post("/api/analyze")
def analyze(body: AnalyzeRequest | None = None, pipeline: RiskPipeline = Depends(get_pipeline)) -> Any:
    """
    Score one message. 400 when message is missing or blank; classifier and
    persistence failures never change the status code.
    """
    try:
        assessment = pipeline.analyze((body or AnalyzeRequest()).to_risk_request())
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"ok": False, "error": str(e)})
    return {"ok": True, **assessment.to_dict()}


@app.get("/api/events-summary")
def events_summary(pipeline: RiskPipeline = Depends(get_pipeline)) -> Any:
    """Totals, counts by risk level, and recent events for charts and reporting."""
    try:
        summary = pipeline.summarize()
    except StoreNotConfigured as e:
        return {"ok": False, "error": str(e)}
    except PersistenceError as e:
        logger.error("events_summary_failed", error=str(e))
        return JSONResponse(status_code=500, content={"ok": False, "error": "Failed to load stats"})
    return {"ok": True, **summary.to_dict()}


@app.get("/health")
def health(pipeline: RiskPipeline = Depends(get_pipeline)) -> dict[str, Any]:
    return {
        "ok": True,
        "classifierConfigured": bool(pipeline.classifier is not None and pipeline.classifier.configured),
        "storeConfigured": pipeline.store is not None,
    }
