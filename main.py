"""
Main entrypoint: FastAPI server for the RiskLab scoring API.

Env: GROQ_API_KEY (optional; without it scoring is heuristic-only),
RISKLAB_DB_URL (optional; without it events are not persisted), API_HOST, API_PORT.

Equivalent: uvicorn backend_risklab.api_server.app:app --host 0.0.0.0 --port 3000
"""

import os

# Configure structured JSON logging before other imports that may log
from backend_risklab.risklab_logging import get_logger

logger = get_logger("main")


def main() -> None:
    from backend_risklab.config import get_settings

    settings = get_settings()
    logger.info(
        "main_config",
        classifier_configured=settings.classifier_configured,
        store_configured=settings.store_configured,
        model=settings.groq_model,
    )

    from backend_risklab.api_server.app import app
    import uvicorn

    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
