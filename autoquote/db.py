"""
Database configuration and session management.
"""

from sqlmodel import SQLModel, create_engine, Session
from typing import Generator
import logging
import os

# Import all models to ensure they are registered with SQLModel
from autoquote.models import QuoteRecord, QuoteDiscount  # noqa: F401

logger = logging.getLogger("autoquote")

# Database URL - defaults to SQLite for development
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./autoquote.db")

# SQLite connections are shared across the threadpool FastAPI runs sync work in
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Create engine
engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def create_db_and_tables():
    """Create database tables."""
    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    """Get database session."""
    with Session(engine) as session:
        yield session


def initialize_database():
    """Initialize database tables."""
    logger.info("Creating database tables...")
    create_db_and_tables()
    logger.info("Database initialization complete")
