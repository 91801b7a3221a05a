"""
SQLAlchemy engine setup with connection pooling and scoped sessions.

Repositories receive a :class:`sessionmaker`; each repository call opens
its own short-lived session and transaction via :func:`session_scope`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy import event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DatabaseSettings, get_database_url, is_sqlite
from .models import Base

if TYPE_CHECKING:
    from collections.abc import Generator

    from sqlalchemy.engine import Engine


def build_engine(settings: DatabaseSettings | None = None) -> Engine:
    """Create a synchronous SQLAlchemy :class:`Engine`.

    SQLite in-memory URLs share one connection across threads so that the
    schema created at start-up stays visible; other SQLite URLs only relax
    the same-thread check.  Server databases get a ``QueuePool``.
    """
    s = settings or DatabaseSettings()
    url = get_database_url(s)

    if is_sqlite(url):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs["poolclass"] = StaticPool
        engine = sa_create_engine(url, echo=s.ECHO, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record) -> None:  # type: ignore[no-untyped-def]
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return sa_create_engine(
        url,
        pool_size=s.POOL_SIZE,
        max_overflow=s.MAX_OVERFLOW,
        pool_timeout=s.POOL_TIMEOUT,
        pool_pre_ping=True,
        echo=s.ECHO,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """Create all tables that do not exist yet (development convenience)."""
    Base.metadata.create_all(engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """Yield a :class:`Session`, committing on success and rolling back on error."""
    session: Session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def ping(engine: Engine) -> bool:
    """Run ``SELECT 1``; raises on connection failure."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return True
