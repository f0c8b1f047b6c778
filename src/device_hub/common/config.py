"""Device Hub configuration via pydantic-settings."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_MIN_SECRET_LENGTH = 16


class DeviceHubSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DEVICE_HUB_")

    environment: str = "development"

    # Secrets have no defaults: a missing variable fails at startup.
    secret_key: str
    ledger_key: str
    admin_secret: str

    # Database
    db_url: str = "sqlite+aiosqlite:///./data/device_hub.db"
    db_pool_size: int = 5
    db_pool_timeout: int = 30  # seconds

    # Tokens
    user_token_ttl: int = 3600  # 1 hour
    device_token_ttl: int = 30 * 86400  # 30 days

    # Access policy
    read_requires_auth: bool = False

    # API
    api_title: str = "Device Hub"
    api_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    log_level: str = "INFO"

    # Pagination
    default_page_size: int = 50
    max_page_size: int = 200

    @field_validator("secret_key", "ledger_key", "admin_secret")
    @classmethod
    def _check_secret_length(cls, value: str) -> str:
        if len(value) < _MIN_SECRET_LENGTH:
            raise ValueError(
                f"must be at least {_MIN_SECRET_LENGTH} characters. "
                "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )
        return value

    @property
    def is_sqlite(self) -> bool:
        return self.db_url.startswith("sqlite")


@lru_cache
def get_settings() -> DeviceHubSettings:
    return DeviceHubSettings()
