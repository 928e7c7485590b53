"""
Export persisted risk events to CSV (fraud_risk_history.csv by default).

Usage:
  python -m backend_risklab.tools.export_events
  python -m backend_risklab.tools.export_events --output reports/history.csv --db-url sqlite:///risklab.db
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from backend_risklab.config import get_settings
from backend_risklab.config.env import mask_url
from backend_risklab.core.exceptions import PersistenceError
from backend_risklab.database.event_store import SQLAlchemyEventStore
from backend_risklab.database.export import export_events_csv
from backend_risklab.risklab_logging import get_logger

logger = get_logger(__name__)

DEFAULT_OUTPUT = Path("fraud_risk_history.csv")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Export RiskLab risk events to CSV.")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help=f"CSV path (default: {DEFAULT_OUTPUT}).")
    parser.add_argument("--db-url", default=None, help="SQLAlchemy URL. Default: RISKLAB_DB_URL / DATABASE_URL.")
    args = parser.parse_args(argv)

    db_url = (args.db_url or get_settings().database_url).strip()
    if not db_url:
        logger.error("export_no_database", message="RISKLAB_DB_URL not set and --db-url not given; cannot export")
        return 1

    logger.info("export_connecting", url=mask_url(db_url))
    store = SQLAlchemyEventStore(db_url)
    try:
        store.init_schema()
        n = export_events_csv(store, args.output)
    except (PersistenceError, OSError) as e:
        logger.error("export_failed", error=str(e))
        return 1
    finally:
        store.close()

    print(f"[export_events] wrote {n} rows to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
