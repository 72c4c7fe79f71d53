"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./recovery_engine.db"

    # Service
    service_name: str = "recovery-engine"
    log_level: str = "INFO"

    # Case defaults
    default_currency: str = "USD"
    case_list_limit: int = 500


settings = Settings()
