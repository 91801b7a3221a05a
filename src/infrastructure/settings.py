"""Application settings loaded from environment variables via Pydantic."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """Central configuration for the electricity billing service."""

    model_config = {"env_prefix": "APP_", "case_sensitive": False}

    environment: str = "development"

    # Database
    database_url: str = "sqlite:///./electricity_billing.db"
    db_pool_size: int = 10
    db_max_overflow: int = 5
    db_pool_timeout: int = 10
    db_echo: bool = False

    # "sql" or "memory"
    storage_backend: str = "sql"

    # JWT
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "electricity-billing"
    jwt_access_token_minutes: int = 60 * 24

    # Argon2
    password_time_cost: int = 3
    password_memory_cost: int = 65536
    password_parallelism: int = 4

    # Billing
    rate_cache_ttl_seconds: float = 60.0
    history_default_page_size: int = 10
    history_max_page_size: int = 100

    # PDF bills
    company_name: str = "ACME ELECTRICITY"
    company_tagline: str = "Power Distribution Services"
    currency_label: str = "Tk"
    support_email: str = "support@acme-electricity.com"

    # Logging
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3001"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def get_settings() -> AppSettings:
    """Return the application settings singleton."""
    return AppSettings()
