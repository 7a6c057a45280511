"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (self-hosted ledger)
    database_url: str = "sqlite:///./wallet_tracker.db"

    # Hosted PostgREST ledger (RestLedgerClient)
    ledger_api_base: str = "http://localhost:54321"
    ledger_api_key: str = ""

    # Service
    service_name: str = "wallet-tracker"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    ledger_max_retries: int = 3
    ledger_backoff_base: float = 0.5  # Exponential backoff base in seconds

    # Budgets
    budget_warning_threshold: int = 80  # Percent of limit


settings = Settings()
