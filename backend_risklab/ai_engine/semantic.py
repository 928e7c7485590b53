"""
Semantic classifier: one chat-completions call per request, strict reply sanitization.

The classifier is an unreliable, optional oracle. Every failure (missing key,
timeout, HTTP error, empty or unparseable reply) is raised internally as
ClassifierError and turned into None by classify(); callers never see an
exception. One attempt per request, no retries, no state shared between calls.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend_risklab.ai_engine.prompts import SYSTEM_PROMPT, risk_prompt
from backend_risklab.analysis_engine.models import RiskRequest
from backend_risklab.config import Settings
from backend_risklab.config.env import DEFAULT_GROQ_BASE_URL, DEFAULT_GROQ_MODEL
from backend_risklab.core.exceptions import ClassifierError
from backend_risklab.risklab_logging import get_logger

logger = get_logger(__name__)

DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 500
DEFAULT_TIMEOUT_SEC = 20.0
REPLY_PREVIEW_CHARS = 300

_OPENING_FENCE = re.compile(r"^```(?:json)?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"```$")


def _numeric_or_none(value: Any) -> float | None:
    """Keep finite JSON numbers; booleans, strings and NaN/inf count as 'not a number'."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def _text_items(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float)) and not isinstance(item, bool)]


class FactorScores(BaseModel):
    """Per-factor classifier scores, nominally 0–100. Missing or non-numeric -> None."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    urgency: float | None = None
    authority_impersonation: float | None = None
    secrecy_or_bypass: float | None = None
    unusual_payment_instructions: float | None = None
    language_manipulation: float | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _numeric(cls, v: Any) -> float | None:
        return _numeric_or_none(v)


class SemanticResult(BaseModel):
    """
    Typed classifier verdict. Every field is nullable or defaulted, so any JSON
    object parses; anything else means no result at all. Values are not range
    checked: blending only needs overall_risk_score to be a number.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    overall_risk_score: float | None = None
    risk_level: str | None = None
    """Classifier's own level; advisory only, the pipeline recomputes the level."""
    factor_scores: FactorScores = Field(default_factory=FactorScores)
    key_indicators: list[str] = Field(default_factory=list)
    safe_handling_advice: list[str] = Field(default_factory=list)
    short_summary: str | None = None

    @field_validator("overall_risk_score", mode="before")
    @classmethod
    def _score(cls, v: Any) -> float | None:
        return _numeric_or_none(v)

    @field_validator("risk_level", "short_summary", mode="before")
    @classmethod
    def _optional_text(cls, v: Any) -> str | None:
        return v if isinstance(v, str) else None

    @field_validator("factor_scores", mode="before")
    @classmethod
    def _factors(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    @field_validator("key_indicators", "safe_handling_advice", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> list[str]:
        return _text_items(v)

    @property
    def has_score(self) -> bool:
        return self.overall_risk_score is not None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()


def sanitize_reply(raw: str) -> str:
    """
    Reduce a model reply to its JSON object text.

    1. Strip a surrounding fenced block (``` or ```json opener, trailing ```).
    2. Keep only the span from the first '{' to the last '}' when both exist.
    """
    text = (raw or "").strip()
    if text.startswith("```"):
        text = _OPENING_FENCE.sub("", text, count=1).strip()
        text = _CLOSING_FENCE.sub("", text).strip()
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last != -1 and last > first:
        text = text[first : last + 1]
    return text


def decode_reply(raw: str) -> SemanticResult:
    """Sanitize and parse a reply. Raises ClassifierError unless it is a JSON object."""
    cleaned = sanitize_reply(raw)
    try:
        data = json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        raise ClassifierError(f"unparseable classifier reply: {e}") from e
    if not isinstance(data, dict):
        raise ClassifierError(f"classifier reply is {type(data).__name__}, expected object")
    try:
        return SemanticResult.model_validate(data)
    except (ValueError, RecursionError) as e:
        raise ClassifierError(f"invalid classifier reply: {e}") from e


def parse_reply(raw: str) -> SemanticResult | None:
    """decode_reply() that logs and returns None instead of raising."""
    try:
        return decode_reply(raw)
    except ClassifierError as e:
        logger.warning(
            "classifier_reply_unparseable",
            error=str(e),
            reply_preview=sanitize_reply(raw)[:REPLY_PREVIEW_CHARS],
        )
        return None


class SemanticClassifier:
    """
    Client for an OpenAI-compatible chat-completions endpoint (Groq by default).

    A fresh httpx.Client is opened per call so latency and failures stay local
    to the request. transport is for tests (httpx.MockTransport).
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_GROQ_MODEL,
        base_url: str = DEFAULT_GROQ_BASE_URL,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> SemanticClassifier:
        return cls(
            settings.groq_api_key,
            model=settings.groq_model,
            base_url=settings.groq_base_url,
            timeout_sec=settings.classifier_timeout_sec,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, request: RiskRequest) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": risk_prompt(request)},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def _request_completion(self, request: RiskRequest) -> str:
        """POST one completion and return the reply text. Raises ClassifierError."""
        if not self.configured:
            raise ClassifierError("GROQ_API_KEY is not set")
        url = f"{self.base_url}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            with httpx.Client(timeout=self.timeout_sec, transport=self.transport) as client:
                resp = client.post(url, json=self.build_payload(request), headers=headers)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            raise ClassifierError(f"classifier HTTP {e.response.status_code}") from e
        except httpx.TimeoutException as e:
            raise ClassifierError(f"classifier timeout after {self.timeout_sec}s") from e
        except (httpx.HTTPError, ValueError) as e:
            raise ClassifierError(f"classifier request failed: {e}") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ClassifierError("classifier response has no message content") from e
        if not isinstance(content, str) or not content.strip():
            raise ClassifierError("classifier returned an empty reply")
        return content

    def classify(self, request: RiskRequest) -> SemanticResult | None:
        """Return the classifier verdict, or None when it is unavailable or unusable."""
        try:
            raw = self._request_completion(request)
            result = decode_reply(raw)
        except ClassifierError as e:
            logger.warning("classifier_unavailable", error=str(e), model=self.model)
            return None

        if not result.has_score:
            # Indicators and advice are still returned to the caller; only the score is ignored.
            logger.warning(
                "classifier_reply_without_score",
                model=self.model,
                risk_level=result.risk_level,
                indicator_count=len(result.key_indicators),
            )
        logger.debug(
            "classifier_scored",
            model=self.model,
            overall_risk_score=result.overall_risk_score,
            risk_level=result.risk_level,
        )
        return result
