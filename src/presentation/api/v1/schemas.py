"""
Pydantic v2 request/response schemas for the electricity billing API.

Request and response bodies use camelCase keys on the wire (snake_case
attributes in Python); monetary values are emitted as JSON numbers.  Error
responses follow RFC 9457 Problem Details.
"""

from __future__ import annotations

import json
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    SecretStr,
    model_validator,
)
from pydantic.alias_generators import to_camel

from domain.models.admin import Admin, AdminRole
from domain.models.bill import BillBreakdown, BillRecord, ConsumerType, MonthlyAggregate
from domain.models.rate import ConsumerScope, EffectiveRate, RateEntry, RateKind, ValueKind

BILLING_MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"
MAX_UNITS_CONSUMED = Decimal("1000000")


# ---------------------------------------------------------------------------
# Base / shared
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    """Base model serialising to camelCase while accepting either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------------------------------------------------------------------------
# RFC 9457 Problem Details error response
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Error response following RFC 9457 Problem Details for HTTP APIs.

    See https://www.rfc-editor.org/rfc/rfc9457
    """

    type: str = Field(
        default="about:blank",
        description="A URI reference that identifies the problem type.",
        examples=["https://api.electricity-billing.example/problems/rate-not-found"],
    )
    title: str = Field(..., description="A short, human-readable summary.", examples=["Rate Entry Not Found"])
    status: int = Field(..., description="The HTTP status code.", examples=[404])
    detail: str = Field(
        ...,
        description="A human-readable explanation specific to this occurrence.",
        examples=["Config with ID 550e8400-e29b-41d4-a716-446655440000 not found"],
    )
    instance: str | None = Field(default=None, description="The request path.")
    errors: list[dict[str, Any]] | None = Field(
        default=None,
        description="Validation error details (when status is 422).",
    )


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Calculation schemas
# ---------------------------------------------------------------------------


class CalculateBillRequest(_CamelModel):
    """Request body for a bill calculation."""

    consumer_type: ConsumerType = Field(..., examples=["residential"])
    units_consumed: Decimal = Field(
        ...,
        ge=0,
        le=MAX_UNITS_CONSUMED,
        decimal_places=2,
        description="Consumption in kWh, at most two decimal places.",
        examples=[100],
    )
    consumer_name: str | None = Field(default=None, max_length=255, examples=["Jane Doe"])
    consumer_id: str | None = Field(default=None, max_length=100, examples=["C-1001"])
    calculation_month: str | None = Field(
        default=None,
        pattern=BILLING_MONTH_PATTERN,
        description="Billing month as YYYY-MM; defaults to the current month.",
        examples=["2026-10"],
    )


class TierLineResponse(_CamelModel):
    tier_name: str
    units_in_tier: float
    rate_per_unit: float
    amount: float


class ChargeLineResponse(_CamelModel):
    name: str
    type: str
    value: float
    amount: float


class BillBreakdownResponse(_CamelModel):
    """Full cost breakdown of one calculation."""

    consumer_name: str | None = None
    consumer_id: str | None = None
    consumer_type: ConsumerType
    units_consumed: float
    calculation_month: str
    tier_breakdown: list[TierLineResponse]
    base_amount: float
    taxes: list[ChargeLineResponse]
    total_tax: float
    surcharges: list[ChargeLineResponse]
    total_surcharge: float
    total_amount: float
    calculation_date: datetime
    applied_rates: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, breakdown: BillBreakdown) -> BillBreakdownResponse:
        return cls(
            consumer_name=breakdown.consumer_name,
            consumer_id=breakdown.consumer_id,
            consumer_type=breakdown.consumer_type,
            units_consumed=float(breakdown.units_consumed),
            calculation_month=breakdown.calculation_month,
            tier_breakdown=[
                TierLineResponse.model_validate(t.to_dict()) for t in breakdown.tier_breakdown
            ],
            base_amount=float(breakdown.base_amount),
            taxes=[ChargeLineResponse.model_validate(t.to_dict()) for t in breakdown.taxes],
            total_tax=float(breakdown.total_tax),
            surcharges=[ChargeLineResponse.model_validate(s.to_dict()) for s in breakdown.surcharges],
            total_surcharge=float(breakdown.total_surcharge),
            total_amount=float(breakdown.total_amount),
            calculation_date=breakdown.calculation_date,
            applied_rates=breakdown.applied_rates,
        )


class BillRecordResponse(_CamelModel):
    """A stored calculation history entry."""

    id: uuid.UUID
    consumer_name: str | None = None
    consumer_id: str | None = None
    consumer_type: ConsumerType
    units_consumed: float
    base_amount: float
    tax_amount: float
    surcharge_amount: float
    total_amount: float
    calculation_month: str
    rate_breakdown: dict[str, Any] = Field(default_factory=dict)
    applied_rates: list[Any] = Field(default_factory=list)
    created_at: datetime

    @classmethod
    def from_domain(cls, record: BillRecord) -> BillRecordResponse:
        return cls(
            id=record.id,
            consumer_name=record.consumer_name,
            consumer_id=record.consumer_id,
            consumer_type=record.consumer_type,
            units_consumed=float(record.units_consumed),
            base_amount=float(record.base_amount),
            tax_amount=float(record.tax_amount),
            surcharge_amount=float(record.surcharge_amount),
            total_amount=float(record.total_amount),
            calculation_month=record.calculation_month,
            rate_breakdown=json.loads(record.rate_breakdown or "{}"),
            applied_rates=json.loads(record.applied_rates or "[]"),
            created_at=record.created_at,
        )


class HistoryPageResponse(BaseModel):
    data: list[BillRecordResponse]
    total: int
    page: int
    limit: int


class MonthlyStatResponse(_CamelModel):
    consumer_type: ConsumerType
    count: int
    total_units: float
    total_revenue: float

    @classmethod
    def from_domain(cls, aggregate: MonthlyAggregate) -> MonthlyStatResponse:
        return cls(
            consumer_type=aggregate.consumer_type,
            count=aggregate.count,
            total_units=float(aggregate.total_units),
            total_revenue=float(aggregate.total_revenue),
        )


# ---------------------------------------------------------------------------
# Rate configuration schemas
# ---------------------------------------------------------------------------


class RateEntryCreate(_CamelModel):
    """Request body for creating a rate entry."""

    rate_name: str = Field(..., min_length=1, max_length=255, examples=["Residential Tier 1"])
    rate_type: RateKind = Field(..., examples=["tier_rate"])
    rate_value: Decimal = Field(..., ge=0, examples=[0.12])
    unit_type: ValueKind | None = Field(default=None, examples=["per_kwh"])
    consumer_type: ConsumerScope = Field(default=ConsumerScope.ALL, examples=["residential"])
    tier_min_units: int = Field(default=0, ge=0)
    tier_max_units: int | None = Field(default=None, ge=0)
    vat_percentage: Decimal = Field(default=Decimal("0"), ge=0)
    fixed_service_charge: Decimal = Field(default=Decimal("0"), ge=0)
    description: str | None = None
    is_active: bool = True
    effective_from: date | None = None
    effective_to: date | None = None

    @model_validator(mode="after")
    def _check_ranges(self) -> RateEntryCreate:
        if self.tier_max_units is not None and self.tier_max_units < self.tier_min_units:
            raise ValueError("tierMaxUnits must be >= tierMinUnits")
        if self.effective_from and self.effective_to and self.effective_to < self.effective_from:
            raise ValueError("effectiveTo must be on or after effectiveFrom")
        return self

    def to_domain(self) -> RateEntry:
        return RateEntry(id=uuid.uuid4(), **rate_fields(self.model_dump()))


_NON_NULLABLE_UPDATES = frozenset(
    {
        "rate_name",
        "rate_type",
        "rate_value",
        "consumer_type",
        "tier_min_units",
        "vat_percentage",
        "fixed_service_charge",
        "is_active",
    }
)


class RateEntryUpdate(_CamelModel):
    """Partial update of a rate entry; omitted fields are left unchanged."""

    rate_name: str | None = Field(default=None, min_length=1, max_length=255)
    rate_type: RateKind | None = None
    rate_value: Decimal | None = Field(default=None, ge=0)
    unit_type: ValueKind | None = None
    consumer_type: ConsumerScope | None = None
    tier_min_units: int | None = Field(default=None, ge=0)
    tier_max_units: int | None = Field(default=None, ge=0)
    vat_percentage: Decimal | None = Field(default=None, ge=0)
    fixed_service_charge: Decimal | None = Field(default=None, ge=0)
    description: str | None = None
    is_active: bool | None = None
    effective_from: date | None = None
    effective_to: date | None = None

    @model_validator(mode="after")
    def _reject_nulls(self) -> RateEntryUpdate:
        nulled = sorted(
            name
            for name in _NON_NULLABLE_UPDATES & self.model_fields_set
            if getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"{', '.join(to_camel(n) for n in nulled)} may not be null")
        return self

    def changes(self) -> dict[str, Any]:
        return rate_fields(self.model_dump(exclude_unset=True))


_RATE_FIELD_NAMES = {
    "rate_name": "name",
    "rate_type": "kind",
    "rate_value": "value",
    "unit_type": "value_kind",
    "consumer_type": "consumer_scope",
}


def rate_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Translate API field names to :class:`RateEntry` attribute names."""
    return {_RATE_FIELD_NAMES.get(k, k): v for k, v in data.items()}


class RateEntryResponse(_CamelModel):
    id: uuid.UUID
    rate_name: str
    rate_type: RateKind
    rate_value: float
    unit_type: ValueKind | None = None
    consumer_type: ConsumerScope
    tier_min_units: int
    tier_max_units: int | None = None
    vat_percentage: float
    fixed_service_charge: float
    description: str | None = None
    is_active: bool
    effective_from: date | None = None
    effective_to: date | None = None
    created_by: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, entry: RateEntry) -> RateEntryResponse:
        return cls(
            id=entry.id,
            rate_name=entry.name,
            rate_type=entry.kind,
            rate_value=float(entry.value),
            unit_type=entry.value_kind,
            consumer_type=entry.consumer_scope,
            tier_min_units=entry.tier_min_units,
            tier_max_units=entry.tier_max_units,
            vat_percentage=float(entry.vat_percentage),
            fixed_service_charge=float(entry.fixed_service_charge),
            description=entry.description,
            is_active=entry.is_active,
            effective_from=entry.effective_from,
            effective_to=entry.effective_to,
            created_by=entry.created_by,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


class FlatRateUpdate(_CamelModel):
    """Replacement flat rate; every currently active entry is deactivated."""

    rate_per_unit: Decimal = Field(..., ge=0, examples=[0.15])
    vat_percentage: Decimal = Field(..., ge=0, examples=[15])
    fixed_service_charge: Decimal = Field(..., ge=0, examples=[5])


class EffectiveRateResponse(_CamelModel):
    rate_per_unit: float
    vat_percentage: float
    fixed_service_charge: float

    @classmethod
    def from_domain(cls, rate: EffectiveRate) -> EffectiveRateResponse:
        return cls(
            rate_per_unit=float(rate.unit_price),
            vat_percentage=float(rate.vat_percent),
            fixed_service_charge=float(rate.fixed_surcharge),
        )


class TaxesSurchargesResponse(_CamelModel):
    taxes: list[RateEntryResponse]
    surcharges: list[RateEntryResponse]


# ---------------------------------------------------------------------------
# Admin / auth schemas
# ---------------------------------------------------------------------------


class AdminRegister(_CamelModel):
    """Request body for registering an administrator."""

    username: str = Field(..., min_length=1, max_length=100, examples=["operator"])
    email: EmailStr = Field(..., examples=["operator@acme-electricity.com"])
    password: SecretStr = Field(..., min_length=6)
    full_name: str | None = Field(default=None, max_length=255)
    role: AdminRole = AdminRole.ADMIN


class AdminLogin(_CamelModel):
    username: str = Field(..., min_length=1)
    password: SecretStr


class AdminResponse(_CamelModel):
    id: uuid.UUID
    username: str
    email: str
    full_name: str | None = None
    role: AdminRole
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime

    @classmethod
    def from_domain(cls, admin: Admin) -> AdminResponse:
        return cls(
            id=admin.id,
            username=admin.username,
            email=admin.email,
            full_name=admin.full_name,
            role=admin.role,
            is_active=admin.is_active,
            last_login=admin.last_login,
            created_at=admin.created_at,
        )


class LoginResponse(BaseModel):
    """OAuth2-style token response (snake_case keys by convention)."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    admin: AdminResponse
