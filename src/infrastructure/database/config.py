"""
Database configuration for the electricity billing service.

A ``postgresql://`` URL (e.g. a hosted Postgres such as Neon) selects the
psycopg2 driver with connection pooling; anything else is handed to
SQLAlchemy unchanged, which keeps the local SQLite default working without
a database server.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from infrastructure.settings import AppSettings


@dataclass(frozen=True)
class DatabaseSettings:
    """Immutable database connection and pool configuration."""

    DATABASE_URL: str = "sqlite:///./electricity_billing.db"

    # Connection-pool tuning (ignored for SQLite)
    POOL_SIZE: int = 10
    MAX_OVERFLOW: int = 5
    POOL_TIMEOUT: int = 10

    ECHO: bool = False

    @classmethod
    def from_app_settings(cls, settings: AppSettings) -> DatabaseSettings:
        return cls(
            DATABASE_URL=settings.database_url,
            POOL_SIZE=settings.db_pool_size,
            MAX_OVERFLOW=settings.db_max_overflow,
            POOL_TIMEOUT=settings.db_pool_timeout,
            ECHO=settings.db_echo,
        )


def is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def get_database_url(settings: Optional[DatabaseSettings] = None) -> str:
    """Return a SQLAlchemy URL, pinning the psycopg2 driver for bare Postgres URLs.

    Parameters
    ----------
    settings:
        An explicit :class:`DatabaseSettings` instance.  When *None* the
        default settings are used (local SQLite file).
    """
    s = settings or DatabaseSettings()
    url = s.DATABASE_URL
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+psycopg2://" + url[len(prefix):]
    return url
