from __future__ import annotations

from fastapi import Request

from weatherapp.core.config import get_settings
from weatherapp.core.http import get_http_client
from weatherapp.services.resolution import ResolutionController
from weatherapp.services.weather.openweather import OpenWeatherClient


def get_controller(request: Request) -> ResolutionController:
    """The process-wide controller built in the app lifespan."""
    return request.app.state.controller


def get_weather_client() -> OpenWeatherClient:
    return OpenWeatherClient.from_settings(get_http_client(), get_settings())
