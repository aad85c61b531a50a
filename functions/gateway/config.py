"""
Configuration and settings for the analysis gateway.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BACKEND_URL = "http://localhost:8000"
DEFAULT_HEALTH_TIMEOUT_SECONDS = 3.0
DEFAULT_UPLOAD_TIMEOUT_SECONDS = 20.0


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")

    # Backend analysis replicas. The dashboard historically used both the
    # underscore and the hyphen spelling, so both are accepted.
    backend_url_1: str = Field(
        default=DEFAULT_BACKEND_URL,
        validation_alias=AliasChoices("BACKEND_URL_1", "BACKEND_URL-1"),
    )
    backend_url_2: str = Field(
        default=DEFAULT_BACKEND_URL,
        validation_alias=AliasChoices("BACKEND_URL_2", "BACKEND_URL-2"),
    )
    extra_backend_urls: str = Field(default="")

    # Shared secret sent to the backends as X-API-Key
    val_api_key: Optional[str] = Field(default=None)

    health_timeout_seconds: float = Field(default=DEFAULT_HEALTH_TIMEOUT_SECONDS, gt=0)
    upload_timeout_seconds: float = Field(default=DEFAULT_UPLOAD_TIMEOUT_SECONDS, gt=0)

    cors_origins: str = Field(default="http://localhost:3000")
    log_level: str = Field(default="INFO")

    def backend_urls(self) -> list[str]:
        return [self.backend_url_1, self.backend_url_2, *_split_csv(self.extra_backend_urls)]

    def cors_origin_list(self) -> list[str]:
        return _split_csv(self.cors_origins)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


def normalize_backends(urls: list[str]) -> tuple[str, ...]:
    """
    Strip trailing slashes and drop empty or repeated entries, keeping the
    first occurrence so the configured order decides precedence.
    """
    seen: list[str] = []
    for url in urls:
        cleaned = (url or "").strip().rstrip("/")
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return tuple(seen)


@dataclass(frozen=True)
class GatewayConfig:
    """Construction-time configuration for BackendGateway."""

    backends: tuple[str, ...]
    api_key: Optional[str] = None
    health_timeout: float = DEFAULT_HEALTH_TIMEOUT_SECONDS
    upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT_SECONDS

    def __post_init__(self):
        if not self.backends:
            raise ValueError("At least one backend URL must be configured")

    @property
    def primary(self) -> str:
        return self.backends[0]

    @classmethod
    def from_settings(cls, settings: Settings) -> "GatewayConfig":
        return cls(
            backends=normalize_backends(settings.backend_urls()),
            api_key=settings.val_api_key or None,
            health_timeout=settings.health_timeout_seconds,
            upload_timeout=settings.upload_timeout_seconds,
        )
