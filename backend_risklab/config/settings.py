"""
Application settings and environment configuration.

Responsibilities:
- Load configuration from environment variables and the project .env file.
- Provide defaults for optional settings.
- Expose typed settings (classifier credentials and model, DB URL, API port,
  pattern table path, CORS origins) for the pipeline, API server, and tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from backend_risklab.config.env import (
    DEFAULT_GROQ_BASE_URL,
    DEFAULT_GROQ_MODEL,
    env_float,
    env_int,
    env_list,
    env_str,
    get_database_url,
    get_groq_api_key,
    load_risklab_env,
)

DEFAULT_CLASSIFIER_TIMEOUT_SEC = 20.0
DEFAULT_SUMMARY_RECENT_LIMIT = 30
DEFAULT_EVENT_WRITER_WORKERS = 2


@dataclass(frozen=True)
class Settings:
    """Resolved configuration. Built once per process by get_settings()."""

    groq_api_key: str = ""
    groq_model: str = DEFAULT_GROQ_MODEL
    groq_base_url: str = DEFAULT_GROQ_BASE_URL
    classifier_timeout_sec: float = DEFAULT_CLASSIFIER_TIMEOUT_SEC
    database_url: str = ""
    patterns_path: Path | None = None
    summary_recent_limit: int = DEFAULT_SUMMARY_RECENT_LIMIT
    event_writer_workers: int = DEFAULT_EVENT_WRITER_WORKERS
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    cors_origins: tuple[str, ...] = ("*",)

    @property
    def classifier_configured(self) -> bool:
        return bool(self.groq_api_key)

    @property
    def store_configured(self) -> bool:
        return bool(self.database_url)


def get_settings() -> Settings:
    """
    Return the current application settings read from the environment.

    Not cached: tests and tools can change env vars between calls.
    """
    load_risklab_env()
    patterns_raw = env_str("RISKLAB_PATTERNS_PATH")
    return Settings(
        groq_api_key=get_groq_api_key(),
        groq_model=env_str("GROQ_MODEL", DEFAULT_GROQ_MODEL),
        groq_base_url=env_str("GROQ_BASE_URL", DEFAULT_GROQ_BASE_URL).rstrip("/"),
        classifier_timeout_sec=max(1.0, env_float("CLASSIFIER_TIMEOUT_SEC", DEFAULT_CLASSIFIER_TIMEOUT_SEC)),
        database_url=get_database_url(),
        patterns_path=Path(patterns_raw) if patterns_raw else None,
        summary_recent_limit=max(1, env_int("SUMMARY_RECENT_LIMIT", DEFAULT_SUMMARY_RECENT_LIMIT)),
        event_writer_workers=max(1, env_int("EVENT_WRITER_WORKERS", DEFAULT_EVENT_WRITER_WORKERS)),
        api_host=env_str("API_HOST", "0.0.0.0"),
        api_port=env_int("API_PORT", env_int("PORT", 3000)),
        cors_origins=env_list("CORS_ORIGINS", ("*",)),
    )
