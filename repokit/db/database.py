"""
Database engine and session management.

Builds the SQLAlchemy engine from ``repokit.config`` settings. In-memory
SQLite URLs get a ``StaticPool`` so the schema persists across connections.
"""
import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from repokit.config import get_settings

logger = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
        kwargs["poolclass"] = StaticPool
    return kwargs


def create_engine_from_settings(url: Optional[str] = None) -> Engine:
    """Create an engine for ``url`` (defaults to ``REPOKIT_DATABASE_URL``)."""
    settings = get_settings()
    url = url or settings.database_url
    logger.debug(f"Creating engine for {url.split('@')[-1]}")
    return create_engine(url, echo=settings.db_echo, **_engine_kwargs(url))


@lru_cache(maxsize=None)
def get_engine() -> Engine:
    return create_engine_from_settings()


def get_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    return sessionmaker(bind=engine or get_engine(), autoflush=False)


def get_db() -> Iterator[Session]:
    """Yield a session and close it afterwards (dependency-style)."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(engine: Optional[Engine] = None) -> Iterator[Session]:
    """Session that commits on success and rolls back on error."""
    db = get_session_factory(engine)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def reset_engine() -> None:
    """Dispose the cached engine (useful for tests after changing settings)."""
    if get_engine.cache_info().currsize:
        get_engine().dispose()
    get_engine.cache_clear()
