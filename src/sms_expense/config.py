"""Typed configuration loader for the SMS expense scanner."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sms_expense.parsing.expense import DEFAULT_DATE_FORMAT

DEFAULT_MAX_COUNT = 100


class Settings(BaseSettings):
    """Environment-backed settings using Pydantic's BaseSettings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    inbox_file: Path | None = Field(default=None, alias="SMS_INBOX_FILE")
    gateway_url: str | None = Field(default=None, alias="SMS_GATEWAY_URL")
    gateway_token: SecretStr | None = Field(default=None, alias="SMS_GATEWAY_TOKEN")
    gateway_timeout: float = Field(default=10.0, gt=0, alias="SMS_GATEWAY_TIMEOUT")

    box: str = Field(default="inbox", alias="SMS_BOX")
    index_from: int = Field(default=0, ge=0, alias="SMS_INDEX_FROM")
    max_count: int = Field(default=DEFAULT_MAX_COUNT, ge=1, alias="SMS_MAX_COUNT")
    date_format: str = Field(default=DEFAULT_DATE_FORMAT, alias="SMS_DATE_FORMAT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str | None) -> str:
        return (value or "INFO").upper()

    @field_validator("gateway_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        if not value:
            return None
        return value.rstrip("/")

    @field_validator("box", mode="after")
    @classmethod
    def _normalize_box(cls, value: str) -> str:
        cleaned = value.strip().lower()
        if not cleaned:
            raise ValueError("SMS_BOX cannot be blank")
        return cleaned


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


__all__ = ["DEFAULT_DATE_FORMAT", "DEFAULT_MAX_COUNT", "Settings", "get_settings"]
