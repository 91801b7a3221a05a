"""Rate configuration application service.

Owns the rate-entry CRUD operations and answers "which flat rate applies
right now".  The effective rate is memoised in an :class:`EffectiveRateCache`
held by the service instance; every write publishes a
:class:`RateEntriesChanged` event and drops the cached value.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any, Callable, Optional, Protocol
from uuid import UUID, uuid4

from domain.events.rate_events import RateEntriesChanged
from domain.exceptions import InvalidRateEntryError, RateEntryNotFoundError
from domain.models.rate import (
    DEFAULT_EFFECTIVE_RATE,
    ConsumerScope,
    EffectiveRate,
    RateEntry,
    RateKind,
)

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS: float = 60.0

_UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "kind",
        "value",
        "value_kind",
        "consumer_scope",
        "tier_min_units",
        "tier_max_units",
        "vat_percentage",
        "fixed_service_charge",
        "description",
        "is_active",
        "effective_from",
        "effective_to",
    }
)

_REQUIRED_FIELDS = (
    "name",
    "kind",
    "value",
    "tier_min_units",
    "vat_percentage",
    "fixed_service_charge",
    "is_active",
)


def validate_rate_entry(entry: RateEntry) -> None:
    """Raise :class:`InvalidRateEntryError` if *entry* breaks a field or range rule."""
    missing = [name for name in _REQUIRED_FIELDS if getattr(entry, name) is None]
    if missing:
        raise InvalidRateEntryError(f"Fields may not be null: {', '.join(missing)}")
    if entry.tier_max_units is not None and entry.tier_max_units < entry.tier_min_units:
        raise InvalidRateEntryError("tierMaxUnits must be >= tierMinUnits")
    if entry.effective_from and entry.effective_to and entry.effective_to < entry.effective_from:
        raise InvalidRateEntryError("effectiveTo must be on or after effectiveFrom")


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------


class RateEntryRepository(Protocol):
    """Port: persistence for rate entries."""

    def save(self, entry: RateEntry) -> RateEntry: ...

    def update(self, entry: RateEntry) -> RateEntry: ...

    def delete(self, rate_id: UUID) -> bool: ...

    def get_by_id(self, rate_id: UUID) -> RateEntry | None: ...

    def list_all(self) -> list[RateEntry]: ...

    def latest_active(self) -> RateEntry | None: ...

    def deactivate_all(self) -> int: ...


class EventPublisher(Protocol):
    def publish(self, event: Any) -> None: ...


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class EffectiveRateCache:
    """Single-slot, time-boxed holder for the effective rate."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._value: EffectiveRate | None = None
        self._stored_at: float = 0.0
        self._generation = 0

    def get(self) -> EffectiveRate | None:
        with self._lock:
            if self._value is None:
                return None
            if self._clock() - self._stored_at >= self._ttl:
                self._value = None
                return None
            return self._value

    @property
    def generation(self) -> int:
        """Bumped by every :meth:`invalidate`."""
        with self._lock:
            return self._generation

    def set(self, value: EffectiveRate, generation: int | None = None) -> bool:
        """Store *value* unless the cache was invalidated since *generation*."""
        with self._lock:
            if generation is not None and generation != self._generation:
                return False
            self._value = value
            self._stored_at = self._clock()
            return True

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._generation += 1


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TaxesAndSurcharges:
    taxes: list[RateEntry] = field(default_factory=list)
    surcharges: list[RateEntry] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class RateConfigService:
    """CRUD over rate entries plus the cached effective-rate lookup."""

    def __init__(
        self,
        rate_repo: RateEntryRepository,
        event_publisher: EventPublisher,
        cache: EffectiveRateCache | None = None,
        on_cache_lookup: Callable[[bool], None] | None = None,
    ) -> None:
        self._rate_repo = rate_repo
        self._event_publisher = event_publisher
        self._cache = cache or EffectiveRateCache()
        self._on_cache_lookup = on_cache_lookup

    # -- helpers ----------------------------------------------------------

    def _rates_changed(self, operation: str, rate_id: UUID | None) -> None:
        self._cache.invalidate()
        self._event_publisher.publish(RateEntriesChanged(operation=operation, rate_id=rate_id))

    def _active_entries(self) -> list[RateEntry]:
        return [e for e in self._rate_repo.list_all() if e.is_active]

    # -- effective rate ---------------------------------------------------

    def get_effective_rate(self) -> EffectiveRate:
        """Return the flat rate of the most recently created active entry.

        Falls back to :data:`DEFAULT_EFFECTIVE_RATE` when no entry is active.
        """
        cached = self._cache.get()
        if self._on_cache_lookup is not None:
            self._on_cache_lookup(cached is not None)
        if cached is not None:
            return cached

        generation = self._cache.generation
        entry = self._rate_repo.latest_active()
        if entry is None:
            rate = DEFAULT_EFFECTIVE_RATE
        else:
            rate = EffectiveRate(
                unit_price=Decimal(entry.value),
                vat_percent=Decimal(entry.vat_percentage or 0),
                fixed_surcharge=Decimal(entry.fixed_service_charge or 0),
            )
        # Dropped if a write invalidated the cache during the lookup.
        self._cache.set(rate, generation)
        return rate

    # -- mutators ---------------------------------------------------------

    def create(self, entry: RateEntry, admin_id: Optional[UUID] = None) -> RateEntry:
        now = datetime.now(UTC)
        entry = replace(entry, created_by=admin_id, created_at=now, updated_at=now)
        validate_rate_entry(entry)
        saved = self._rate_repo.save(entry)
        logger.info("Rate entry %s (%s) created", saved.id, saved.name)
        self._rates_changed("create", saved.id)
        return saved

    def update(self, rate_id: UUID, **fields: Any) -> RateEntry:
        entry = self.get(rate_id)
        changes = {k: v for k, v in fields.items() if k in _UPDATABLE_FIELDS}
        updated = replace(entry, **changes, updated_at=datetime.now(UTC))
        validate_rate_entry(updated)
        updated = self._rate_repo.update(updated)
        logger.info("Rate entry %s updated: %s", rate_id, sorted(changes))
        self._rates_changed("update", rate_id)
        return updated

    def toggle_active(self, rate_id: UUID) -> RateEntry:
        entry = self.get(rate_id)
        toggled = replace(entry, is_active=not entry.is_active, updated_at=datetime.now(UTC))
        toggled = self._rate_repo.update(toggled)
        logger.info("Rate entry %s active=%s", rate_id, toggled.is_active)
        self._rates_changed("toggle", rate_id)
        return toggled

    def remove(self, rate_id: UUID) -> None:
        self.get(rate_id)
        self._rate_repo.delete(rate_id)
        logger.info("Rate entry %s removed", rate_id)
        self._rates_changed("remove", rate_id)

    def replace_flat_rate(
        self,
        unit_price: Decimal,
        vat_percent: Decimal,
        fixed_surcharge: Decimal,
        admin_id: Optional[UUID] = None,
    ) -> RateEntry:
        """Deactivate every active entry and install a new flat rate."""
        deactivated = self._rate_repo.deactivate_all()
        logger.info("Deactivated %d rate entries before flat-rate replacement", deactivated)
        return self.create(
            RateEntry(
                id=uuid4(),
                name="Flat Rate",
                kind=RateKind.TIER_RATE,
                value=unit_price,
                vat_percentage=vat_percent,
                fixed_service_charge=fixed_surcharge,
                consumer_scope=ConsumerScope.ALL,
                is_active=True,
                effective_from=date.today(),
            ),
            admin_id=admin_id,
        )

    # -- queries ----------------------------------------------------------

    def get(self, rate_id: UUID) -> RateEntry:
        entry = self._rate_repo.get_by_id(rate_id)
        if entry is None:
            raise RateEntryNotFoundError(rate_id=str(rate_id))
        return entry

    def list_all(self) -> list[RateEntry]:
        return sorted(self._rate_repo.list_all(), key=lambda e: e.created_at, reverse=True)

    def find_active(self, now: Optional[datetime] = None) -> list[RateEntry]:
        """Active entries whose activation window covers *now*.

        Ordered by consumer scope, then tier lower bound.  This is a listing
        query; it does not influence :meth:`get_effective_rate`.
        """
        today = (now or datetime.now(UTC)).date()
        entries = [e for e in self._active_entries() if e.is_effective_on(today)]
        return sorted(entries, key=lambda e: (e.consumer_scope.value, e.tier_min_units))

    def find_by_consumer_type(self, consumer_type: ConsumerScope) -> list[RateEntry]:
        entries = [
            e
            for e in self._active_entries()
            if e.consumer_scope in (consumer_type, ConsumerScope.ALL)
        ]
        return sorted(entries, key=lambda e: e.tier_min_units)

    def get_tier_rates(self, consumer_type: ConsumerScope) -> list[RateEntry]:
        entries = [
            e
            for e in self._active_entries()
            if e.consumer_scope == consumer_type and e.kind == RateKind.TIER_RATE
        ]
        return sorted(entries, key=lambda e: e.tier_min_units)

    def get_taxes_and_surcharges(self, consumer_type: ConsumerScope) -> TaxesAndSurcharges:
        entries = [
            e
            for e in self._active_entries()
            if e.consumer_scope in (consumer_type, ConsumerScope.ALL)
        ]
        return TaxesAndSurcharges(
            taxes=[e for e in entries if e.kind == RateKind.TAX],
            surcharges=[e for e in entries if e.kind == RateKind.SURCHARGE],
        )
