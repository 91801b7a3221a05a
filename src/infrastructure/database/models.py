"""
SQLAlchemy 2.0+ ORM models for the electricity billing service.

Tables
------
* ``admins``        -- back-office accounts
* ``rate_entries``  -- billing rate configuration (flat, tier, tax, surcharge)
* ``bill_records``  -- append-only calculation history
"""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from domain.models.admin import AdminRole
from domain.models.bill import ConsumerType
from domain.models.rate import ConsumerScope, RateKind, ValueKind


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------

class Base(DeclarativeBase):
    """Shared declarative base for every ORM model."""
    pass


def _enum_column(enum_cls: type[enum.Enum], name: str) -> Enum:
    # Persist the lowercase ``.value`` rather than the member name.
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=32,
    )


# ---------------------------------------------------------------------------
# AdminModel
# ---------------------------------------------------------------------------

class AdminModel(Base):
    """An administrator allowed to manage rates and read history."""

    __tablename__ = "admins"
    __table_args__ = (
        UniqueConstraint("username", name="uq_admins_username"),
        UniqueConstraint("email", name="uq_admins_email"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[AdminRole] = mapped_column(
        _enum_column(AdminRole, "admin_role"),
        nullable=False,
        default=AdminRole.ADMIN,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Admin(id={self.id!r}, username={self.username!r})>"


# ---------------------------------------------------------------------------
# RateEntryModel
# ---------------------------------------------------------------------------

class RateEntryModel(Base):
    """One row of billing rate configuration."""

    __tablename__ = "rate_entries"
    __table_args__ = (
        Index("ix_rate_entries_active_created", "is_active", "created_at"),
        Index("ix_rate_entries_consumer_scope", "consumer_scope"),
        CheckConstraint("rate_value >= 0", name="ck_rate_entries_value_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    rate_name: Mapped[str] = mapped_column(String(255), nullable=False)
    rate_type: Mapped[RateKind] = mapped_column(
        _enum_column(RateKind, "rate_kind"), nullable=False
    )
    rate_value: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)
    unit_type: Mapped[Optional[ValueKind]] = mapped_column(
        _enum_column(ValueKind, "value_kind"), nullable=True
    )
    consumer_scope: Mapped[ConsumerScope] = mapped_column(
        _enum_column(ConsumerScope, "consumer_scope"),
        nullable=False,
        default=ConsumerScope.ALL,
    )
    tier_min_units: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tier_max_units: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    vat_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("0")
    )
    fixed_service_charge: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    effective_from: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    effective_to: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return (
            f"<RateEntry(id={self.id!r}, name={self.rate_name!r}, "
            f"active={self.is_active!r})>"
        )


# ---------------------------------------------------------------------------
# BillRecordModel
# ---------------------------------------------------------------------------

class BillRecordModel(Base):
    """Append-only history of computed bills.

    ``rate_breakdown`` and ``applied_rates`` hold JSON text snapshots so
    later rate changes never alter a stored bill.
    """

    __tablename__ = "bill_records"
    __table_args__ = (
        Index("ix_bill_records_created_at", "created_at"),
        Index("ix_bill_records_consumer_id", "consumer_id"),
        Index("ix_bill_records_month_type", "calculation_month", "consumer_type"),
        CheckConstraint(
            "total_amount >= 0", name="ck_bill_records_total_non_negative"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    consumer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    consumer_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    consumer_type: Mapped[ConsumerType] = mapped_column(
        _enum_column(ConsumerType, "consumer_type"), nullable=False
    )
    units_consumed: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    base_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    surcharge_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    calculation_month: Mapped[str] = mapped_column(String(7), nullable=False)
    rate_breakdown: Mapped[str] = mapped_column(Text, nullable=False)
    applied_rates: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<BillRecord(id={self.id!r}, month={self.calculation_month!r}, "
            f"total={self.total_amount!r})>"
        )
