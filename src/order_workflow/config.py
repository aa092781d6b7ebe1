from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ORDERS_", env_file=".env", extra="ignore"
    )

    # Cache
    cache_backend: Literal["memory", "redis"] = "memory"
    cache_ttl_seconds: int = 300
    redis_url: str = "redis://localhost:6379/0"

    # Notifications (empty address disables them)
    admin_email: str = "admin@tienda.local"

    # Runtime
    log_level: str = "INFO"
    shutdown_timeout_seconds: float = 10.0
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.cache_ttl_seconds)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
