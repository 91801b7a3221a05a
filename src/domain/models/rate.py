from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4


class RateKind(enum.Enum):
    BASE_RATE = "base_rate"
    TAX = "tax"
    SURCHARGE = "surcharge"
    TIER_RATE = "tier_rate"


class ValueKind(enum.Enum):
    PER_KWH = "per_kwh"
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class ConsumerScope(enum.Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"
    ALL = "all"


@dataclass
class RateEntry:
    id: UUID = field(default_factory=uuid4)
    name: str = ""
    kind: RateKind = RateKind.BASE_RATE
    value: Decimal = Decimal("0")
    value_kind: Optional[ValueKind] = None
    consumer_scope: ConsumerScope = ConsumerScope.ALL
    tier_min_units: int = 0
    tier_max_units: Optional[int] = None
    vat_percentage: Decimal = Decimal("0")
    fixed_service_charge: Decimal = Decimal("0")
    description: Optional[str] = None
    is_active: bool = True
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None
    created_by: Optional[UUID] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def is_effective_on(self, day: date) -> bool:
        """Whether the activation window covers *day* (open bounds count as covering)."""
        if self.effective_from is not None and self.effective_from > day:
            return False
        if self.effective_to is not None and self.effective_to < day:
            return False
        return True


@dataclass(frozen=True)
class EffectiveRate:
    """The flat unit price, VAT percentage and fixed surcharge used for a bill."""

    unit_price: Decimal
    vat_percent: Decimal
    fixed_surcharge: Decimal


DEFAULT_EFFECTIVE_RATE = EffectiveRate(
    unit_price=Decimal("0.12"),
    vat_percent=Decimal("15"),
    fixed_surcharge=Decimal("5"),
)
