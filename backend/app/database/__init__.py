"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        # SQLite connections are shared across FastAPI worker threads.
        return {"connect_args": {"check_same_thread": False, "timeout": 30}}
    return {
        "pool_size": 10,
        "max_overflow": 5,
        "pool_timeout": 10,
        "pool_recycle": 1800,
        "pool_pre_ping": True,
        "connect_args": {"connect_timeout": 5, "application_name": "hubcontent_backend"},
    }


def build_engine(url: str | None = None, **overrides: Any) -> Engine:
    """Create an engine for ``url`` (defaults to the configured database)."""
    database_url = url or settings.get_database_url()
    kwargs = _engine_kwargs(database_url)
    kwargs.update(overrides)
    new_engine = create_engine(database_url, echo=settings.database_echo, future=True, **kwargs)

    @event.listens_for(new_engine, "connect")
    def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
        connection_record.info["connect_time"] = datetime.now()
        if database_url.startswith("sqlite"):
            # pysqlite must not manage transactions itself or SAVEPOINT breaks
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
        logger.debug("Database connection established")

    if database_url.startswith("sqlite"):

        @event.listens_for(new_engine, "begin")
        def receive_begin(conn: Any) -> None:
            # Take the write lock up front so concurrent writers queue on busy_timeout
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return new_engine


engine: Engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create all tables (development and tests; production uses migrations)."""
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
