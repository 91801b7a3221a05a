"""Bill calculation application service.

A calculation is one unit of work: look up the effective rate, compute the
breakdown, record it in history, return it.  If recording fails the error
propagates and no breakdown reaches the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol

from domain.events.rate_events import BillCalculated
from domain.models.bill import BillBreakdown, ConsumerType

if TYPE_CHECKING:
    from application.services.history_service import HistoryRecorder
    from application.services.rate_config_service import RateConfigService
    from domain.services.bill_calculator import BillCalculator

logger = logging.getLogger(__name__)


class EventPublisher(Protocol):
    def publish(self, event: Any) -> None: ...


@dataclass(frozen=True)
class BillRequest:
    consumer_type: ConsumerType
    units_consumed: Decimal
    consumer_name: Optional[str] = None
    consumer_id: Optional[str] = None
    calculation_month: Optional[str] = None


class CalculationService:
    """Coordinates rate lookup, bill computation and history recording."""

    def __init__(
        self,
        rate_service: RateConfigService,
        history: HistoryRecorder,
        calculator: BillCalculator,
        event_publisher: EventPublisher,
        on_calculated: Callable[[BillBreakdown], None] | None = None,
    ) -> None:
        self._rate_service = rate_service
        self._history = history
        self._calculator = calculator
        self._event_publisher = event_publisher
        self._on_calculated = on_calculated

    def calculate_bill(self, request: BillRequest) -> BillBreakdown:
        rate = self._rate_service.get_effective_rate()
        breakdown = self._calculator.calculate(
            request.consumer_type,
            request.units_consumed,
            rate,
            calculation_month=request.calculation_month,
            consumer_name=request.consumer_name,
            consumer_id=request.consumer_id,
        )

        record = self._history.record(breakdown)
        logger.debug(
            "Calculated %s units for %s at %s/unit",
            request.units_consumed,
            request.consumer_type.value,
            rate.unit_price,
        )

        self._event_publisher.publish(
            BillCalculated(
                record_id=record.id,
                consumer_type=breakdown.consumer_type.value,
                total_amount=str(breakdown.total_amount),
            )
        )
        if self._on_calculated is not None:
            self._on_calculated(breakdown)
        return breakdown
