"""Shared fixtures for unit tests."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from uuid import UUID

import pytest

# Ensure src is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from application.services.history_service import HistoryRecorder
from application.services.rate_config_service import EffectiveRateCache, RateConfigService
from domain.models.admin import Admin, AdminRole
from domain.models.rate import EffectiveRate
from domain.services.bill_calculator import BillCalculator
from infrastructure.adapters import (
    InMemoryAdminRepository,
    InMemoryBillRecordRepository,
    InMemoryRateEntryRepository,
    LoggingEventPublisher,
)

ADMIN_ID = UUID("00000000-0000-0000-0000-000000000001")
NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Monotonic clock stand-in that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingPublisher:
    def __init__(self) -> None:
        self.events: list = []

    def publish(self, event) -> None:  # type: ignore[no-untyped-def]
        self.events.append(event)


@pytest.fixture
def admin_id() -> UUID:
    return ADMIN_ID


@pytest.fixture
def standard_rate() -> EffectiveRate:
    return EffectiveRate(
        unit_price=Decimal("0.12"),
        vat_percent=Decimal("15"),
        fixed_surcharge=Decimal("5"),
    )


@pytest.fixture
def sample_admin() -> Admin:
    return Admin(
        id=ADMIN_ID,
        username="operator",
        email="operator@acme-electricity.com",
        hashed_password="$argon2id$v=19$m=65536,t=3,p=4$hash",
        full_name="Grid Operator",
        role=AdminRole.ADMIN,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def rate_repo() -> InMemoryRateEntryRepository:
    return InMemoryRateEntryRepository()


@pytest.fixture
def bill_repo() -> InMemoryBillRecordRepository:
    return InMemoryBillRecordRepository()


@pytest.fixture
def admin_repo() -> InMemoryAdminRepository:
    return InMemoryAdminRepository()


@pytest.fixture
def event_publisher() -> LoggingEventPublisher:
    return LoggingEventPublisher()


@pytest.fixture
def recording_publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_service(
    rate_repo: InMemoryRateEntryRepository,
    recording_publisher: RecordingPublisher,
    clock: FakeClock,
) -> RateConfigService:
    return RateConfigService(
        rate_repo=rate_repo,
        event_publisher=recording_publisher,
        cache=EffectiveRateCache(ttl_seconds=60, clock=clock),
    )


@pytest.fixture
def history(bill_repo: InMemoryBillRecordRepository) -> HistoryRecorder:
    return HistoryRecorder(bill_repo=bill_repo, max_page_size=100)


@pytest.fixture
def calculator() -> BillCalculator:
    return BillCalculator()
