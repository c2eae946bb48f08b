from __future__ import annotations

from typing import Any

import httpx
import structlog

from weatherapp.core.config import OPENWEATHER_URL, Settings
from weatherapp.core.errors import FetchFailed, LocationNotFound
from weatherapp.schemas.weather import Coordinate, WeatherRecord


logger = structlog.get_logger(__name__)

UNITS = "metric"


def parse_weather_record(data: Any) -> WeatherRecord:
    """Project an OpenWeatherMap current-weather payload onto a WeatherRecord."""
    try:
        name = data["name"]
        country = data["sys"]["country"]
        temp = data["main"]["temp"]
        description = data["weather"][0]["description"]
    except (KeyError, IndexError, TypeError) as exc:
        raise FetchFailed(f"Unexpected weather payload: missing {exc!s}") from exc

    if not isinstance(name, str) or not isinstance(country, str) or not isinstance(description, str):
        raise FetchFailed("Unexpected weather payload: non-string field")
    if isinstance(temp, bool) or not isinstance(temp, (int, float)):
        raise FetchFailed(f"Unexpected weather payload: temperature {temp!r}")

    return WeatherRecord(
        place_name=name,
        country_code=country,
        temperature_celsius=float(temp),
        condition_description=description,
    )


class OpenWeatherClient:
    """Current-weather lookups against OpenWeatherMap, always in metric units."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str | None,
        base_url: str = OPENWEATHER_URL,
    ) -> None:
        self.http_client = http_client
        self.api_key = api_key
        self.base_url = base_url

    @classmethod
    def from_settings(cls, http_client: httpx.AsyncClient, settings: Settings) -> "OpenWeatherClient":
        return cls(http_client, settings.api_key, settings.openweather_base_url)

    async def fetch_by_coordinate(self, coordinate: Coordinate) -> WeatherRecord:
        params = {"lat": coordinate.latitude, "lon": coordinate.longitude}
        return await self._fetch(params, by_name=False)

    async def fetch_by_name(self, name: str) -> WeatherRecord:
        query = name.strip()
        if not query:
            raise LocationNotFound("Empty location name")
        return await self._fetch({"q": query}, by_name=True)

    async def _fetch(self, params: dict[str, Any], *, by_name: bool) -> WeatherRecord:
        if not self.api_key:
            logger.error("openweather_api_key_missing")
            raise FetchFailed("OpenWeather API key is not configured")

        query = {**params, "units": UNITS, "appid": self.api_key}
        try:
            resp = await self.http_client.get(self.base_url, params=query)
        except httpx.HTTPError as exc:
            logger.warning("weather_upstream_error", error=type(exc).__name__, by_name=by_name)
            raise FetchFailed(f"Weather upstream error: {type(exc).__name__}") from exc

        if resp.status_code != 200:
            logger.warning(
                "weather_upstream_status",
                status=resp.status_code,
                provider_message=_provider_message(resp),
                by_name=by_name,
            )
            if by_name and resp.status_code == 404:
                raise LocationNotFound(f"No match for {params['q']!r}")
            raise FetchFailed(f"Weather upstream status {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            logger.warning("weather_upstream_invalid_json", by_name=by_name)
            raise FetchFailed("Weather upstream returned invalid JSON") from exc

        record = parse_weather_record(data)
        logger.debug("weather_fetched", place=record.place_name, country=record.country_code)
        return record


def _provider_message(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        return str(message) if message is not None else None
    return None
