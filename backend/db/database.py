"""
Database configuration and connection handling.

Supports SQLite/PostgreSQL and an in-memory fallback mode.
Set USE_DATABASE=false to run without database (registry-only mode).
"""

import os
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .models import Base

logger = logging.getLogger(__name__)

# Feature flag: enable/disable database
USE_DATABASE = os.getenv("USE_DATABASE", "true").lower() in ("true", "1", "yes", "on")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bus_system.db")

# Global engine instance
engine: Engine | None = None
SessionLocal = None


def build_engine(url: str) -> Engine:
    """Create an engine with pool settings suited to the backend."""
    engine_kwargs = {
        "echo": os.getenv("SQLALCHEMY_ECHO", "false").lower() == "true",
        "pool_pre_ping": True,
    }
    if url.startswith("sqlite"):
        # Ticks write from worker threads.
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10
        engine_kwargs["pool_recycle"] = 3600
    return create_engine(url, **engine_kwargs)


def init_engine() -> Engine | None:
    """Initialize database engine if database is enabled."""
    global engine, SessionLocal

    if not USE_DATABASE:
        logger.info("Database is disabled (USE_DATABASE=false)")
        return None

    try:
        new_engine = build_engine(DATABASE_URL)

        # Test connection
        with new_engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        engine = new_engine
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        logger.info(f"Database connected: {DATABASE_URL.split('@')[-1]}")
        return engine

    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        logger.warning("Running in fallback mode (no database persistence)")
        engine = None
        SessionLocal = None
        return None


def is_database_available() -> bool:
    """Check if database is available for use."""
    if not USE_DATABASE:
        return False
    if engine is None:
        return False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def create_tables():
    """Create all tables (for initial setup)."""
    if engine is not None:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")


def drop_tables():
    """Drop all tables (use with caution!)."""
    if engine is not None:
        Base.metadata.drop_all(bind=engine)
        logger.info("Database tables dropped")


# Initialize engine on module import
init_engine()
