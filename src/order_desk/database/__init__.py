from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool, QueuePool

import os

from ..models import Base

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./order_desk.db")
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))


def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")  # Wait up to 5s for locks
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str = None):
    """Build the engine for `url` (defaults to DATABASE_URL).

    SQLite gets a single shared connection; other databases get a bounded
    QueuePool where callers beyond `POOL_SIZE` wait for a free connection.
    """
    url = url or DATABASE_URL
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,  # Set to True for SQL debugging
        )
        event.listen(engine, "connect", _set_sqlite_pragma)
        return engine
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=POOL_SIZE,
        max_overflow=0,  # fixed upper bound, excess requests wait
        pool_timeout=POOL_TIMEOUT,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=3600,  # Recycle connections after 1 hour
    )


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine) -> None:
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)


@contextmanager
def get_db(session_factory):
    """Yield a session and always close it, returning its connection to the pool."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
