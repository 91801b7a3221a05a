"""Adapter implementations bridging infrastructure to application-layer ports.

Provides in-memory repository adapters (used by the ``memory`` storage
backend and by tests) and a logging event publisher.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from domain.models.admin import Admin
from domain.models.bill import BillRecord, ConsumerType, MonthlyAggregate
from domain.models.rate import RateEntry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# In-memory repository adapters (swap for SQL repos in production)
# ---------------------------------------------------------------------------

class InMemoryRateEntryRepository:
    """Synchronous in-memory rate-entry store."""

    def __init__(self) -> None:
        self._store: dict[UUID, RateEntry] = {}

    def save(self, entry: RateEntry) -> RateEntry:
        self._store[entry.id] = entry
        return entry

    def update(self, entry: RateEntry) -> RateEntry:
        self._store[entry.id] = entry
        return entry

    def delete(self, rate_id: UUID) -> bool:
        return self._store.pop(rate_id, None) is not None

    def get_by_id(self, rate_id: UUID) -> Optional[RateEntry]:
        return self._store.get(rate_id)

    def list_all(self) -> list[RateEntry]:
        return sorted(self._store.values(), key=lambda e: e.created_at, reverse=True)

    def latest_active(self) -> Optional[RateEntry]:
        active = [e for e in self._store.values() if e.is_active]
        if not active:
            return None
        # Later inserts win ties on created_at.
        return max(reversed(active), key=lambda e: e.created_at)

    def deactivate_all(self) -> int:
        count = 0
        now = datetime.now(UTC)
        for rate_id, entry in list(self._store.items()):
            if entry.is_active:
                self._store[rate_id] = replace(entry, is_active=False, updated_at=now)
                count += 1
        return count


class InMemoryBillRecordRepository:
    """Append-only in-memory bill history."""

    def __init__(self) -> None:
        self._records: list[BillRecord] = []

    def _newest_first(self, records: list[BillRecord]) -> list[BillRecord]:
        # Later inserts win ties on created_at.
        return sorted(reversed(records), key=lambda r: r.created_at, reverse=True)

    def save(self, record: BillRecord) -> BillRecord:
        self._records.append(record)
        return record

    def get_by_id(self, record_id: UUID) -> Optional[BillRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def list_page(self, offset: int, limit: int) -> tuple[list[BillRecord], int]:
        ordered = self._newest_first(self._records)
        return ordered[offset : offset + limit], len(ordered)

    def list_by_consumer(self, consumer_id: str) -> list[BillRecord]:
        return self._newest_first([r for r in self._records if r.consumer_id == consumer_id])

    def aggregate_month(self, month: str) -> list[MonthlyAggregate]:
        buckets: dict[ConsumerType, list[BillRecord]] = defaultdict(list)
        for record in self._records:
            if record.calculation_month == month:
                buckets[record.consumer_type].append(record)
        return [
            MonthlyAggregate(
                consumer_type=consumer_type,
                count=len(records),
                total_units=sum((r.units_consumed for r in records), Decimal("0")),
                total_revenue=sum((r.total_amount for r in records), Decimal("0")),
            )
            for consumer_type, records in sorted(buckets.items(), key=lambda kv: kv[0].value)
        ]


class InMemoryAdminRepository:
    """Synchronous in-memory admin store."""

    def __init__(self) -> None:
        self._store: dict[UUID, Admin] = {}

    def get_by_id(self, admin_id: UUID) -> Optional[Admin]:
        return self._store.get(admin_id)

    def get_by_username(self, username: str) -> Optional[Admin]:
        return next((a for a in self._store.values() if a.username == username), None)

    def get_by_email(self, email: str) -> Optional[Admin]:
        return next((a for a in self._store.values() if a.email == email), None)

    def save(self, admin: Admin) -> Admin:
        self._store[admin.id] = admin
        return admin

    def update(self, admin: Admin) -> Admin:
        self._store[admin.id] = admin
        return admin


# ---------------------------------------------------------------------------
# Event publisher
# ---------------------------------------------------------------------------

class LoggingEventPublisher:
    """Event publisher that logs events."""

    def publish(self, event: Any) -> None:
        logger.info("Domain event: %s", event)
