"""
SQL repository implementations for the electricity billing service.

Each repository satisfies one of the application-layer ports and works on
domain dataclasses; ORM rows never leave this module.  Every call opens its
own session and transaction via :func:`session_scope`.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import sessionmaker

from domain.models.admin import Admin
from domain.models.bill import BillRecord, MonthlyAggregate
from domain.models.rate import RateEntry
from domain.services.bill_calculator import round2

from .engine import session_scope
from .models import AdminModel, BillRecordModel, RateEntryModel


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo; every timestamp we write is UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _decimal(value: object) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# =========================================================================
# RateEntryRepository
# =========================================================================

def _rate_to_domain(row: RateEntryModel) -> RateEntry:
    return RateEntry(
        id=row.id,
        name=row.rate_name,
        kind=row.rate_type,
        value=_decimal(row.rate_value),
        value_kind=row.unit_type,
        consumer_scope=row.consumer_scope,
        tier_min_units=row.tier_min_units,
        tier_max_units=row.tier_max_units,
        vat_percentage=_decimal(row.vat_percentage),
        fixed_service_charge=_decimal(row.fixed_service_charge),
        description=row.description,
        is_active=row.is_active,
        effective_from=row.effective_from,
        effective_to=row.effective_to,
        created_by=row.created_by,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _rate_columns(entry: RateEntry) -> dict:
    return {
        "rate_name": entry.name,
        "rate_type": entry.kind,
        "rate_value": entry.value,
        "unit_type": entry.value_kind,
        "consumer_scope": entry.consumer_scope,
        "tier_min_units": entry.tier_min_units,
        "tier_max_units": entry.tier_max_units,
        "vat_percentage": entry.vat_percentage,
        "fixed_service_charge": entry.fixed_service_charge,
        "description": entry.description,
        "is_active": entry.is_active,
        "effective_from": entry.effective_from,
        "effective_to": entry.effective_to,
        "updated_at": entry.updated_at,
    }


class SqlRateEntryRepository:
    """CRUD for :class:`RateEntryModel` (``rate_entries``)."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def save(self, entry: RateEntry) -> RateEntry:
        with session_scope(self._session_factory) as session:
            row = RateEntryModel(
                id=entry.id,
                created_by=entry.created_by,
                created_at=entry.created_at,
                **_rate_columns(entry),
            )
            session.add(row)
            session.flush()
            return _rate_to_domain(row)

    def update(self, entry: RateEntry) -> RateEntry:
        with session_scope(self._session_factory) as session:
            session.execute(
                update(RateEntryModel)
                .where(RateEntryModel.id == entry.id)
                .values(**_rate_columns(entry))
            )
            row = session.get(RateEntryModel, entry.id)
            return _rate_to_domain(row) if row is not None else entry

    def delete(self, rate_id: uuid.UUID) -> bool:
        with session_scope(self._session_factory) as session:
            result = session.execute(
                delete(RateEntryModel).where(RateEntryModel.id == rate_id)
            )
            return result.rowcount > 0

    def get_by_id(self, rate_id: uuid.UUID) -> Optional[RateEntry]:
        with session_scope(self._session_factory) as session:
            row = session.get(RateEntryModel, rate_id)
            return _rate_to_domain(row) if row is not None else None

    def list_all(self) -> list[RateEntry]:
        with session_scope(self._session_factory) as session:
            stmt = select(RateEntryModel).order_by(RateEntryModel.created_at.desc())
            return [_rate_to_domain(r) for r in session.execute(stmt).scalars()]

    def latest_active(self) -> Optional[RateEntry]:
        with session_scope(self._session_factory) as session:
            stmt = (
                select(RateEntryModel)
                .where(RateEntryModel.is_active.is_(True))
                .order_by(RateEntryModel.created_at.desc())
                .limit(1)
            )
            row = session.execute(stmt).scalar_one_or_none()
            return _rate_to_domain(row) if row is not None else None

    def deactivate_all(self) -> int:
        with session_scope(self._session_factory) as session:
            result = session.execute(
                update(RateEntryModel)
                .where(RateEntryModel.is_active.is_(True))
                .values(is_active=False, updated_at=datetime.now(UTC))
            )
            return result.rowcount


# =========================================================================
# BillRecordRepository (append-only)
# =========================================================================

def _bill_to_domain(row: BillRecordModel) -> BillRecord:
    return BillRecord(
        id=row.id,
        consumer_name=row.consumer_name,
        consumer_id=row.consumer_id,
        consumer_type=row.consumer_type,
        units_consumed=_decimal(row.units_consumed),
        base_amount=_decimal(row.base_amount),
        tax_amount=_decimal(row.tax_amount),
        surcharge_amount=_decimal(row.surcharge_amount),
        total_amount=_decimal(row.total_amount),
        calculation_month=row.calculation_month,
        rate_breakdown=row.rate_breakdown,
        applied_rates=row.applied_rates,
        created_at=_aware(row.created_at),
    )


class SqlBillRecordRepository:
    """Insert and query :class:`BillRecordModel` rows; there is no update path."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def save(self, record: BillRecord) -> BillRecord:
        with session_scope(self._session_factory) as session:
            row = BillRecordModel(
                id=record.id,
                consumer_name=record.consumer_name,
                consumer_id=record.consumer_id,
                consumer_type=record.consumer_type,
                units_consumed=record.units_consumed,
                base_amount=record.base_amount,
                tax_amount=record.tax_amount,
                surcharge_amount=record.surcharge_amount,
                total_amount=record.total_amount,
                calculation_month=record.calculation_month,
                rate_breakdown=record.rate_breakdown,
                applied_rates=record.applied_rates,
                created_at=record.created_at,
            )
            session.add(row)
            session.flush()
            return _bill_to_domain(row)

    def get_by_id(self, record_id: uuid.UUID) -> Optional[BillRecord]:
        with session_scope(self._session_factory) as session:
            row = session.get(BillRecordModel, record_id)
            return _bill_to_domain(row) if row is not None else None

    def list_page(self, offset: int, limit: int) -> tuple[list[BillRecord], int]:
        with session_scope(self._session_factory) as session:
            total = session.execute(
                select(func.count()).select_from(BillRecordModel)
            ).scalar_one()
            stmt = (
                select(BillRecordModel)
                .order_by(BillRecordModel.created_at.desc(), BillRecordModel.id.desc())
                .offset(offset)
                .limit(limit)
            )
            items = [_bill_to_domain(r) for r in session.execute(stmt).scalars()]
            return items, int(total)

    def list_by_consumer(self, consumer_id: str) -> list[BillRecord]:
        with session_scope(self._session_factory) as session:
            stmt = (
                select(BillRecordModel)
                .where(BillRecordModel.consumer_id == consumer_id)
                .order_by(BillRecordModel.created_at.desc(), BillRecordModel.id.desc())
            )
            return [_bill_to_domain(r) for r in session.execute(stmt).scalars()]

    def aggregate_month(self, month: str) -> list[MonthlyAggregate]:
        with session_scope(self._session_factory) as session:
            stmt = (
                select(
                    BillRecordModel.consumer_type,
                    func.count(BillRecordModel.id),
                    func.sum(BillRecordModel.units_consumed),
                    func.sum(BillRecordModel.total_amount),
                )
                .where(BillRecordModel.calculation_month == month)
                .group_by(BillRecordModel.consumer_type)
                .order_by(BillRecordModel.consumer_type)
            )
            return [
                MonthlyAggregate(
                    consumer_type=consumer_type,
                    count=int(count),
                    # SQLite sums NUMERIC as REAL.
                    total_units=round2(_decimal(units)),
                    total_revenue=round2(_decimal(revenue)),
                )
                for consumer_type, count, units, revenue in session.execute(stmt)
            ]


# =========================================================================
# AdminRepository
# =========================================================================

def _admin_to_domain(row: AdminModel) -> Admin:
    return Admin(
        id=row.id,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        full_name=row.full_name,
        role=row.role,
        is_active=row.is_active,
        last_login=_aware(row.last_login),
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


class SqlAdminRepository:
    """CRUD for :class:`AdminModel` (``admins``)."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _get_one(self, *criteria) -> Optional[Admin]:  # type: ignore[no-untyped-def]
        with session_scope(self._session_factory) as session:
            row = session.execute(select(AdminModel).where(*criteria)).scalar_one_or_none()
            return _admin_to_domain(row) if row is not None else None

    def get_by_id(self, admin_id: uuid.UUID) -> Optional[Admin]:
        return self._get_one(AdminModel.id == admin_id)

    def get_by_username(self, username: str) -> Optional[Admin]:
        return self._get_one(AdminModel.username == username)

    def get_by_email(self, email: str) -> Optional[Admin]:
        return self._get_one(AdminModel.email == email)

    def save(self, admin: Admin) -> Admin:
        with session_scope(self._session_factory) as session:
            row = AdminModel(
                id=admin.id,
                username=admin.username,
                email=admin.email,
                hashed_password=admin.hashed_password,
                full_name=admin.full_name,
                role=admin.role,
                is_active=admin.is_active,
                last_login=admin.last_login,
                created_at=admin.created_at,
                updated_at=admin.updated_at,
            )
            session.add(row)
            session.flush()
            return _admin_to_domain(row)

    def update(self, admin: Admin) -> Admin:
        with session_scope(self._session_factory) as session:
            session.execute(
                update(AdminModel)
                .where(AdminModel.id == admin.id)
                .values(
                    email=admin.email,
                    hashed_password=admin.hashed_password,
                    full_name=admin.full_name,
                    role=admin.role,
                    is_active=admin.is_active,
                    last_login=admin.last_login,
                    updated_at=datetime.now(UTC),
                )
            )
            row = session.get(AdminModel, admin.id)
            return _admin_to_domain(row) if row is not None else admin
