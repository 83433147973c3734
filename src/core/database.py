"""Database connection and session management.

This module handles the database connection using SQLAlchemy. SQLite is the
default backend; any SQLAlchemy URL can be supplied through DATABASE_URL.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from config import DATA_DIR, DATABASE_URL
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def create_db_engine(url: str = DATABASE_URL, **kwargs) -> Engine:
    """Create an engine, enabling foreign keys when the backend is SQLite."""
    if _is_sqlite(url):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    db_engine = create_engine(url, **kwargs)

    if _is_sqlite(url):
        @event.listens_for(db_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return db_engine


engine = create_db_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create tables if they do not exist."""
    if _is_sqlite(str(bind.url)):
        # Ensure data directory exists
        DATA_DIR.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=bind)


def get_db():
    """Dependency for getting a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
