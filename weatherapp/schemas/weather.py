from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class WeatherRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    place_name: str = Field(..., description="Place name reported by the provider.")
    country_code: str = Field(..., description="ISO 3166 country code.")
    temperature_celsius: float = Field(..., description="Air temperature (C).")
    condition_description: str = Field(..., description="Human-friendly condition.")
