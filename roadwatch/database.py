"""
Database engine and session factories.

Nothing here is created at import time: the process entry point builds the
engine, owns its lifecycle, and hands sessions to IncidentStore.
"""
import logging
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from roadwatch.core.config import Settings, get_settings
from roadwatch.db.base import Base

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def create_db_engine(settings: Optional[Settings] = None, url: Optional[str] = None) -> Engine:
    """Build a sync engine for the configured database URL."""
    settings = settings or get_settings()
    database_url = url or settings.DATABASE_URL
    if not database_url:
        raise ValueError("[ERROR] DATABASE_URL not found!")

    if database_url.lower().startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},  # SQLite multi-thread
            echo=settings.DATABASE_ECHO,
        )

    return create_engine(
        database_url,
        echo=settings.DATABASE_ECHO,
        pool_pre_ping=True,
        pool_size=3,
        max_overflow=10,
        pool_recycle=settings.DATABASE_POOL_RECYCLE,
        pool_timeout=30,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def test_connection(engine: Engine) -> bool:
    """Test database connection - NON-BLOCKING."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.info(f"[STORE] Database connected: {engine.url.render_as_string(hide_password=True)}")
        return True
    except Exception as e:
        logger.warning(f"[STORE] Database connection failed (continuing): {e}")
        return False


def init_db(engine: Engine) -> None:
    """Create all tables registered on Base."""
    # Import all models so they're registered with Base
    import roadwatch.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("[STORE] Database tables initialized")


def close_db_connection(engine: Engine) -> None:
    engine.dispose()
    logger.info("[STORE] Database connections closed")
