from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WEATHERAPP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    http_timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)

    # Weather provider
    openweather_api_key: SecretStr | None = Field(default=None)
    openweather_base_url: str = Field(default=OPENWEATHER_URL)

    # Device
    platform: Literal["android", "ios"] = Field(default="ios")
    location_permission: Literal["granted", "denied", "never_ask_again"] = Field(default="granted")
    device_latitude: float | None = Field(default=None, ge=-90, le=90)
    device_longitude: float | None = Field(default=None, ge=-180, le=180)

    # Position fix policy
    position_high_accuracy: bool = Field(default=True)
    position_timeout_ms: int = Field(default=30_000, ge=1)
    position_maximum_age_ms: int = Field(default=10_000, ge=0)
    position_distance_filter_m: float = Field(default=10.0, ge=0.0)

    # Run the coordinate flow once when the app starts
    resolve_on_startup: bool = Field(default=True)

    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        # Allow WEATHERAPP_CORS_ORIGINS as JSON array or comma-separated string.
        if not isinstance(value, str):
            return value
        parsed = value.strip()
        if parsed.startswith("["):
            try:
                return [str(x).strip() for x in json.loads(parsed) if str(x).strip()]
            except ValueError:
                pass
        return [s.strip() for s in parsed.split(",") if s.strip()]

    @property
    def api_key(self) -> str | None:
        if self.openweather_api_key is None:
            return None
        value = self.openweather_api_key.get_secret_value().strip()
        return value or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
