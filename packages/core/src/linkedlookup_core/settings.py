from __future__ import annotations

from functools import lru_cache
from urllib.parse import urlsplit

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="forbid",
    )

    environment: str = Field(default="local")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="pretty")
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    http_timeout_seconds: float = Field(default=15.0, gt=0.0)
    user_agent: str = Field(default="linkedlookup/0.1")
    use_dev_relay: bool = Field(default=False)
    dev_relay_base: str = Field(default="http://localhost:5173/lookup")
    # source name -> origin, e.g. {"bao": "https://ols.example.org/ols4"}
    origin_overrides: dict[str, str] = Field(default_factory=dict)

    @field_validator("dev_relay_base")
    @classmethod
    def _relay_base_absolute(cls, value: str) -> str:
        parts = urlsplit(value.strip())
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("dev_relay_base must be an absolute http(s) URL")
        return value.strip().rstrip("/")


def resolve_base_url(
    settings: Settings,
    source: str,
    default_origin: str,
    relay_slug: str | None = None,
) -> str:
    """
    Pick the origin a connector should talk to.

    Order: explicit override for the source, then the development relay
    (only for sources that have a relay slug), then the public origin.
    """
    override = (settings.origin_overrides.get(source) or "").strip()
    if override:
        return override.rstrip("/")
    if settings.use_dev_relay and relay_slug:
        return f"{settings.dev_relay_base.rstrip('/')}/{relay_slug}"
    return default_origin.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
