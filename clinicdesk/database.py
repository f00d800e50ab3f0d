# clinicdesk/database.py
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import get_settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str):
    """Create an engine; SQLite needs cross-thread access under the ASGI server."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, **kwargs)
    return create_engine(database_url, pool_pre_ping=True, echo=False)


# Create engine
engine = build_engine(get_settings().database_url)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()

def create_tables(bind=None):
    """Create all database tables - MUST import models first!"""
    # Import models to register them with Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created")

def drop_tables(bind=None):
    """Drop all database tables"""
    Base.metadata.drop_all(bind=bind or engine)
    logger.info("Database tables dropped")
