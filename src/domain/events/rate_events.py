from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID


@dataclass
class RateEntriesChanged:
    """Emitted after any write to the rate configuration table."""

    operation: str = ""
    rate_id: Optional[UUID] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: str = "RateEntriesChanged"


@dataclass
class BillCalculated:
    record_id: Optional[UUID] = None
    consumer_type: str = ""
    total_amount: str = "0"
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: str = "BillCalculated"
