"""Calculation history application service.

Persists each computed bill as an immutable :class:`BillRecord` and serves
the read side: paginated listing, per-consumer listing, lookup by id and
monthly aggregation by consumer type.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID, uuid4

from application.schemas.pagination import PaginationParams
from domain.exceptions import BillRecordNotFoundError
from domain.models.bill import BillBreakdown, BillRecord, MonthlyAggregate
from domain.services.bill_calculator import validate_billing_month

logger = logging.getLogger(__name__)


class BillRecordRepository(Protocol):
    """Port: append-only persistence for bill records."""

    def save(self, record: BillRecord) -> BillRecord: ...

    def get_by_id(self, record_id: UUID) -> BillRecord | None: ...

    def list_page(self, offset: int, limit: int) -> tuple[list[BillRecord], int]: ...

    def list_by_consumer(self, consumer_id: str) -> list[BillRecord]: ...

    def aggregate_month(self, month: str) -> list[MonthlyAggregate]: ...


@dataclass(frozen=True)
class HistoryPage:
    items: list[BillRecord] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10


def serialize_breakdown(breakdown: BillBreakdown) -> str:
    return json.dumps(
        {
            "tierBreakdown": [t.to_dict() for t in breakdown.tier_breakdown],
            "taxes": [t.to_dict() for t in breakdown.taxes],
            "surcharges": [s.to_dict() for s in breakdown.surcharges],
        }
    )


class HistoryRecorder:
    """Durable, queryable log of computed bills."""

    def __init__(
        self,
        bill_repo: BillRecordRepository,
        max_page_size: int = 100,
    ) -> None:
        self._bill_repo = bill_repo
        self._max_page_size = max_page_size

    def record(self, breakdown: BillBreakdown) -> BillRecord:
        record = BillRecord(
            id=uuid4(),
            consumer_name=breakdown.consumer_name,
            consumer_id=breakdown.consumer_id,
            consumer_type=breakdown.consumer_type,
            units_consumed=breakdown.units_consumed,
            base_amount=breakdown.base_amount,
            tax_amount=breakdown.total_tax,
            surcharge_amount=breakdown.total_surcharge,
            total_amount=breakdown.total_amount,
            calculation_month=breakdown.calculation_month,
            rate_breakdown=serialize_breakdown(breakdown),
            applied_rates=json.dumps(breakdown.applied_rates),
            created_at=breakdown.calculation_date,
        )
        saved = self._bill_repo.save(record)
        logger.info(
            "Bill record %s stored (%s, %s, total=%s)",
            saved.id,
            saved.consumer_type.value,
            saved.calculation_month,
            saved.total_amount,
        )
        return saved

    def list_page(self, page: int = 1, limit: int = 10) -> HistoryPage:
        params = PaginationParams(page=page, size=limit, max_size=self._max_page_size)
        items, total = self._bill_repo.list_page(params.offset, params.size)
        return HistoryPage(items=items, total=total, page=params.page, limit=params.size)

    def list_by_consumer(self, consumer_id: str) -> list[BillRecord]:
        return self._bill_repo.list_by_consumer(consumer_id)

    def get_by_id(self, record_id: UUID) -> BillRecord:
        record = self._bill_repo.get_by_id(record_id)
        if record is None:
            raise BillRecordNotFoundError(record_id=str(record_id))
        return record

    def monthly_aggregate(self, month: str) -> list[MonthlyAggregate]:
        return self._bill_repo.aggregate_month(validate_billing_month(month))
