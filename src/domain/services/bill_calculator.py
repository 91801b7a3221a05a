from __future__ import annotations

import re
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from domain.exceptions import InvalidBillingMonthError
from domain.models.bill import BillBreakdown, ChargeLine, ConsumerType, TierLine
from domain.models.rate import EffectiveRate, RateEntry, ValueKind

CENT = Decimal("0.01")

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

STANDARD_TIER_NAME = "Standard Rate"
VAT_NAME = "VAT"
SERVICE_CHARGE_NAME = "Service Charge"


def round2(amount: Decimal) -> Decimal:
    """Round to 0.01, halves away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def current_billing_month(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(UTC)
    return f"{now.year:04d}-{now.month:02d}"


def validate_billing_month(month: str) -> str:
    if not _MONTH_RE.match(month):
        raise InvalidBillingMonthError(month)
    return month


class BillCalculator:

    def calculate(
        self,
        consumer_type: ConsumerType,
        units_consumed: Decimal,
        rate: EffectiveRate,
        *,
        calculation_month: Optional[str] = None,
        consumer_name: Optional[str] = None,
        consumer_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BillBreakdown:
        now = now or datetime.now(UTC)
        month = (
            validate_billing_month(calculation_month)
            if calculation_month
            else current_billing_month(now)
        )

        subtotal = units_consumed * rate.unit_price
        vat_amount = subtotal * rate.vat_percent / Decimal("100")

        base_amount = round2(subtotal)
        total_tax = round2(vat_amount)
        total_surcharge = round2(rate.fixed_surcharge)

        return BillBreakdown(
            consumer_name=consumer_name,
            consumer_id=consumer_id,
            consumer_type=consumer_type,
            units_consumed=units_consumed,
            calculation_month=month,
            tier_breakdown=[
                TierLine(
                    tier_name=STANDARD_TIER_NAME,
                    units_in_tier=units_consumed,
                    rate_per_unit=rate.unit_price,
                    amount=base_amount,
                )
            ],
            base_amount=base_amount,
            taxes=[
                ChargeLine(
                    name=VAT_NAME,
                    type=ValueKind.PERCENTAGE.value,
                    value=rate.vat_percent,
                    amount=total_tax,
                )
            ],
            total_tax=total_tax,
            surcharges=[
                ChargeLine(
                    name=SERVICE_CHARGE_NAME,
                    type=ValueKind.FIXED.value,
                    value=rate.fixed_surcharge,
                    amount=total_surcharge,
                )
            ],
            total_surcharge=total_surcharge,
            # Sum of the already rounded parts, so stored totals always reconcile.
            total_amount=base_amount + total_tax + total_surcharge,
            calculation_date=now,
            applied_rates=[],
        )


# ---------------------------------------------------------------------------
# Tiered pricing helpers. Not used by BillCalculator.calculate.
# ---------------------------------------------------------------------------


def split_into_tiers(units_consumed: Decimal, tier_rates: Sequence[RateEntry]) -> list[TierLine]:
    """Distribute consumption across ordered tier bands.

    Each band takes at most ``tier_max_units - tier_min_units`` units (an
    open upper bound is unlimited). Units left over after the last band are
    billed at the last band's rate as an "(Additional)" line.
    """
    breakdown: list[TierLine] = []
    remaining = units_consumed

    for tier in tier_rates:
        if remaining <= 0:
            break
        if tier.tier_max_units is None:
            in_tier = remaining
        else:
            in_tier = min(remaining, Decimal(tier.tier_max_units - tier.tier_min_units))
        if in_tier > 0:
            breakdown.append(
                TierLine(
                    tier_name=tier.name,
                    units_in_tier=round2(in_tier),
                    rate_per_unit=tier.value,
                    amount=round2(in_tier * tier.value),
                )
            )
            remaining -= in_tier

    if remaining > 0 and tier_rates:
        last = tier_rates[-1]
        breakdown.append(
            TierLine(
                tier_name=f"{last.name} (Additional)",
                units_in_tier=round2(remaining),
                rate_per_unit=last.value,
                amount=round2(remaining * last.value),
            )
        )

    return breakdown


def apply_charges(base_amount: Decimal, entries: Sequence[RateEntry]) -> list[ChargeLine]:
    """Turn tax / surcharge entries into charge lines against *base_amount*.

    Entries without a percentage or fixed value kind contribute a zero
    fixed charge.
    """
    lines: list[ChargeLine] = []
    for entry in entries:
        if entry.value_kind == ValueKind.PERCENTAGE:
            amount = base_amount * entry.value / Decimal("100")
            kind = ValueKind.PERCENTAGE.value
        elif entry.value_kind == ValueKind.FIXED:
            amount = entry.value
            kind = ValueKind.FIXED.value
        else:
            amount = Decimal("0")
            kind = ValueKind.FIXED.value
        lines.append(ChargeLine(name=entry.name, type=kind, value=entry.value, amount=round2(amount)))
    return lines
