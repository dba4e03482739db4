"""
Scheduled sweep entry point.

Run from cron (or any scheduler) to process every pending incident once:

    python run.py
"""
import logging
import sys

from roadwatch.core.config import get_settings
from roadwatch.database import (
    close_db_connection, create_db_engine, create_session_factory, init_db, test_connection,
)
from roadwatch.services.automation_engine import AutomationEngine
from roadwatch.services.incident_store import IncidentStore


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def main() -> int:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    logger = logging.getLogger("roadwatch.run")

    logger.info("=" * 70)
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION} pending sweep")
    logger.info("=" * 70)

    engine = create_db_engine(settings)
    try:
        if not test_connection(engine):
            logger.error("[STARTUP] Database unavailable, sweep skipped")
            return 1
        init_db(engine)

        SessionLocal = create_session_factory(engine)
        with SessionLocal() as session:
            processed = AutomationEngine(IncidentStore(session), settings=settings).monitor_pending()
        logger.info(f"[OK] Sweep complete: {processed} incident(s) processed")
        return 0
    finally:
        close_db_connection(engine)


if __name__ == "__main__":
    sys.exit(main())
