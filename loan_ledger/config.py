"""Configuration management using Pydantic Settings"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="LOAN_LEDGER_", extra="ignore"
    )

    # Database
    database_url: str = "sqlite:///./loan_ledger.db"
    # "memory" keeps the ledger in process (lost on restart)
    ledger_backend: Literal["sql", "memory"] = "sql"

    # Service
    service_name: str = "loan-ledger"
    log_level: str = "INFO"

    # Demo data
    seed_demo_users: bool = True

    # Lending defaults
    currency_symbol: str = "₦"
    default_rate_percent: float = 12.0
    default_tenor_months: int = 12


settings = Settings()
