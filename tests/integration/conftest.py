"""Integration test fixtures: SQLite by default, PostgreSQL via testcontainers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from infrastructure.database.config import DatabaseSettings
from infrastructure.database.engine import build_engine, build_session_factory, create_schema
from infrastructure.database.repository import (
    SqlAdminRepository,
    SqlBillRecordRepository,
    SqlRateEntryRepository,
)


@pytest.fixture(scope="session")
def postgres_url():
    """Provide a PostgreSQL URL via testcontainers.

    Skips when Docker (or testcontainers itself) is unavailable.
    """
    try:
        from testcontainers.postgres import PostgresContainer

        with PostgresContainer("postgres:16-alpine") as pg:
            yield pg.get_connection_url()
    except Exception:
        pytest.skip("PostgreSQL testcontainer unavailable")


@pytest.fixture(params=["sqlite", "postgresql"])
def sync_engine(request):
    """A freshly created schema on in-memory SQLite, and on Postgres when available."""
    if request.param == "sqlite":
        url = "sqlite://"
    else:
        url = request.getfixturevalue("postgres_url")

    engine = build_engine(DatabaseSettings(DATABASE_URL=url))
    create_schema(engine)
    yield engine
    from infrastructure.database.models import Base

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(sync_engine):
    return build_session_factory(sync_engine)


@pytest.fixture
def rate_repo(session_factory) -> SqlRateEntryRepository:
    return SqlRateEntryRepository(session_factory)


@pytest.fixture
def bill_repo(session_factory) -> SqlBillRecordRepository:
    return SqlBillRecordRepository(session_factory)


@pytest.fixture
def admin_repo(session_factory) -> SqlAdminRepository:
    return SqlAdminRepository(session_factory)
