"""Application configuration."""

import os

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_cascade.domain.units import ConversionMode

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    unit_conversion_mode: ConversionMode = ConversionMode.STRICT
    default_weight_lbs: float = 150.0
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @field_validator("unit_conversion_mode", mode="before")
    @classmethod
    def _parse_conversion_mode(cls, value: object) -> object:
        if isinstance(value, str) or value is None:
            return parse_conversion_mode(value)
        return value


def parse_conversion_mode(raw: str | None) -> ConversionMode:
    """Parse the unit conversion mode from env; unset means strict."""
    if raw is None:
        return ConversionMode.STRICT
    cleaned = raw.strip().lower().replace("-", "_")
    if not cleaned:
        return ConversionMode.STRICT
    try:
        return ConversionMode(cleaned)
    except ValueError as exc:
        allowed = ", ".join(mode.value for mode in ConversionMode)
        raise ValueError(
            f"Unknown unit conversion mode {raw!r}; expected one of: {allowed}"
        ) from exc
