from domain.models.admin import Admin, AdminRole
from domain.models.bill import (
    BillBreakdown,
    BillRecord,
    ChargeLine,
    ConsumerType,
    MonthlyAggregate,
    TierLine,
)
from domain.models.rate import (
    DEFAULT_EFFECTIVE_RATE,
    ConsumerScope,
    EffectiveRate,
    RateEntry,
    RateKind,
    ValueKind,
)

__all__ = [
    "DEFAULT_EFFECTIVE_RATE",
    "Admin",
    "AdminRole",
    "BillBreakdown",
    "BillRecord",
    "ChargeLine",
    "ConsumerScope",
    "ConsumerType",
    "EffectiveRate",
    "MonthlyAggregate",
    "RateEntry",
    "RateKind",
    "TierLine",
    "ValueKind",
]
