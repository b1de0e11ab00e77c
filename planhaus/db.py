import logging
from typing import Optional
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from config import DATABASE_URL
from planhaus.models import Base

engine: Optional[Engine] = None


def _build_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # Queries run on worker threads via asyncio.to_thread
        connect_args["check_same_thread"] = False
    new_engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)

    if url.startswith("sqlite"):
        @event.listens_for(new_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


def configure_engine(url: str) -> Engine:
    """Replace the process engine, disposing the previous one."""
    global engine
    if engine is not None:
        engine.dispose()
    engine = _build_engine(url)
    logging.info(f"Database engine configured for {engine.url.render_as_string(hide_password=True)}")
    return engine


def get_engine() -> Engine:
    if engine is None:
        return configure_engine(DATABASE_URL)
    return engine


def init_db() -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(get_engine())
    logging.info("Database schema initialized.")
