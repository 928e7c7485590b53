"""
Environment variable loading for Backend RiskLab.

- GROQ_API_KEY: credential for the semantic classifier (unset -> classifier disabled)
- GROQ_MODEL / GROQ_BASE_URL: chat-completions model and OpenAI-compatible base URL
- RISKLAB_DB_URL / DATABASE_URL: SQLAlchemy URL for the event store (unset -> not persisted)
- CORS_ORIGINS: comma-separated browser origins allowed to call the API (default "*")
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_risklab/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"
DEFAULT_GROQ_BASE_URL = "https://api.groq.com/openai/v1"


def load_risklab_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = env_str(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def env_list(name: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    """Comma-separated values, blanks dropped."""
    raw = env_str(name)
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip()) or default


def get_groq_api_key() -> str:
    load_risklab_env()
    return env_str("GROQ_API_KEY")


def get_database_url() -> str:
    """
    Resolve the event store URL.
    Order: RISKLAB_DB_URL > DATABASE_URL > "" (persistence disabled).
    """
    load_risklab_env()
    return env_str("RISKLAB_DB_URL") or env_str("DATABASE_URL")


def mask_url(url: str) -> str:
    """Strip credentials and query string from a DB URL for logging."""
    if not url:
        return ""
    scheme, _, rest = url.partition("://")
    host = rest.rsplit("@", 1)[-1].split("?")[0]
    return f"{scheme}://{host}" if rest else scheme
