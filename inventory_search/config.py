from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class AppConfig(BaseSettings):
    """Inventory search settings.

    Read from environment variables (case-insensitive, e.g. CACHE_TTL_SECONDS)
    and from a .env file in the working directory when one exists.
    """
    # Application
    app_env: str = "local"
    log_level: str = "INFO"
    log_json: bool = False

    # Seed data
    seed_value: int = 1234
    seed_record_count: int = Field(default=90, ge=0)

    # Paging
    default_page_size: int = Field(default=20, ge=1)

    # Result caches
    cache_ttl_seconds: float = Field(default=60.0, ge=0)
    cache_max_entries: int = Field(default=5, ge=1)

    # Orchestrator
    search_debounce_ms: int = Field(default=50, ge=0)

    # HTTP service and client
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_base_url: str = "http://localhost:8000"
    http_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Process-wide settings, loaded on first use."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def set_config_for_test(**kwargs) -> AppConfig:
    """Replace the settings; unspecified fields come from the environment."""
    global _config
    _config = AppConfig(**kwargs)
    return _config
