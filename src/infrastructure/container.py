"""Dependency injection container for the electricity billing service.

Wires together all infrastructure adapters and application services,
exposing factory functions suitable for FastAPI's ``Depends()`` system.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from application.services.auth_service import AdminAuthService
from application.services.calculation_service import CalculationService
from application.services.history_service import HistoryRecorder
from application.services.rate_config_service import EffectiveRateCache, RateConfigService
from domain.services.bill_calculator import BillCalculator
from infrastructure.adapters import (
    InMemoryAdminRepository,
    InMemoryBillRecordRepository,
    InMemoryRateEntryRepository,
    LoggingEventPublisher,
)
from infrastructure.auth.jwt_handler import JWTConfig, JWTHandler
from infrastructure.auth.password_handler import PasswordHandler
from infrastructure.observability.metrics import record_bill_calculated, record_rate_cache_lookup
from infrastructure.settings import AppSettings, get_settings

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Central DI container that owns all service instances."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self.settings = settings or get_settings()
        self.engine: Engine | None = None

        # Infrastructure adapters
        if self.settings.storage_backend == "memory":
            self.rate_repo = InMemoryRateEntryRepository()
            self.bill_repo = InMemoryBillRecordRepository()
            self.admin_repo = InMemoryAdminRepository()
        else:
            self._wire_sql()
        self.event_publisher = LoggingEventPublisher()

        self.password_handler = PasswordHandler(
            time_cost=self.settings.password_time_cost,
            memory_cost=self.settings.password_memory_cost,
            parallelism=self.settings.password_parallelism,
        )
        self.jwt_handler = JWTHandler(
            signing_key=self.settings.jwt_secret,
            config=JWTConfig(
                algorithm=self.settings.jwt_algorithm,
                access_token_expire_minutes=self.settings.jwt_access_token_minutes,
                issuer=self.settings.jwt_issuer,
            ),
        )

        # Domain services
        self.bill_calculator = BillCalculator()

        # Application services
        self.rate_service = RateConfigService(
            rate_repo=self.rate_repo,
            event_publisher=self.event_publisher,
            cache=EffectiveRateCache(ttl_seconds=self.settings.rate_cache_ttl_seconds),
            on_cache_lookup=record_rate_cache_lookup,
        )

        self.history_recorder = HistoryRecorder(
            bill_repo=self.bill_repo,
            max_page_size=self.settings.history_max_page_size,
        )

        self.calculation_service = CalculationService(
            rate_service=self.rate_service,
            history=self.history_recorder,
            calculator=self.bill_calculator,
            event_publisher=self.event_publisher,
            on_calculated=record_bill_calculated,
        )

        self.auth_service = AdminAuthService(
            admin_repo=self.admin_repo,
            password_handler=self.password_handler,
            jwt_handler=self.jwt_handler,
        )

        logger.info(
            "ServiceContainer initialized (storage=%s)", self.settings.storage_backend
        )

    def _wire_sql(self) -> None:
        from infrastructure.database.config import DatabaseSettings
        from infrastructure.database.engine import (
            build_engine,
            build_session_factory,
            create_schema,
        )
        from infrastructure.database.repository import (
            SqlAdminRepository,
            SqlBillRecordRepository,
            SqlRateEntryRepository,
        )

        self.engine = build_engine(DatabaseSettings.from_app_settings(self.settings))
        if not self.settings.is_production:
            create_schema(self.engine)
        session_factory = build_session_factory(self.engine)
        self.rate_repo = SqlRateEntryRepository(session_factory)
        self.bill_repo = SqlBillRecordRepository(session_factory)
        self.admin_repo = SqlAdminRepository(session_factory)

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


# Module-level singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Return the global container singleton."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer) -> None:
    """Install a pre-built container (used by the app factory and tests)."""
    global _container
    _container = container


def reset_container() -> None:
    """Reset the global container (for testing)."""
    global _container
    if _container is not None:
        _container.close()
    _container = None


# ---------------------------------------------------------------------------
# FastAPI dependency factories
# ---------------------------------------------------------------------------


def get_app_settings() -> AppSettings:
    return get_container().settings


def get_rate_config_service() -> RateConfigService:
    return get_container().rate_service


def get_calculation_service() -> CalculationService:
    return get_container().calculation_service


def get_history_recorder() -> HistoryRecorder:
    return get_container().history_recorder


def get_auth_service() -> AdminAuthService:
    return get_container().auth_service
