from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4


class ConsumerType(enum.Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"


@dataclass(frozen=True)
class TierLine:
    tier_name: str
    units_in_tier: Decimal
    rate_per_unit: Decimal
    amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "tierName": self.tier_name,
            "unitsInTier": float(self.units_in_tier),
            "ratePerUnit": float(self.rate_per_unit),
            "amount": float(self.amount),
        }


@dataclass(frozen=True)
class ChargeLine:
    """A tax or surcharge applied on top of the base amount."""

    name: str
    type: str  # "percentage" | "fixed"
    value: Decimal
    amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "value": float(self.value),
            "amount": float(self.amount),
        }


@dataclass(frozen=True)
class BillBreakdown:
    """Full cost breakdown produced by a single calculation."""

    consumer_type: ConsumerType
    units_consumed: Decimal
    calculation_month: str
    tier_breakdown: list[TierLine]
    base_amount: Decimal
    taxes: list[ChargeLine]
    total_tax: Decimal
    surcharges: list[ChargeLine]
    total_surcharge: Decimal
    total_amount: Decimal
    calculation_date: datetime
    applied_rates: list[dict[str, Any]] = field(default_factory=list)
    consumer_name: Optional[str] = None
    consumer_id: Optional[str] = None


@dataclass(frozen=True)
class BillRecord:
    """Immutable history entry for one calculation."""

    id: UUID = field(default_factory=uuid4)
    consumer_name: Optional[str] = None
    consumer_id: Optional[str] = None
    consumer_type: ConsumerType = ConsumerType.RESIDENTIAL
    units_consumed: Decimal = Decimal("0")
    base_amount: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    surcharge_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    calculation_month: str = ""
    rate_breakdown: str = "{}"
    applied_rates: str = "[]"
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class MonthlyAggregate:
    consumer_type: ConsumerType
    count: int
    total_units: Decimal
    total_revenue: Decimal
