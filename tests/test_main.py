import asyncio

import pytest
import respx
from httpx import Response

from conftest import openweather_payload
from weatherapp.core.config import OPENWEATHER_URL, get_settings
from weatherapp.core.http import get_http_client
from weatherapp.main import create_app
from weatherapp.schemas.resolution import ErrorState, IdleState, ResolutionPhase
from weatherapp.services.location.permission import AlwaysGrantedPermissionGate
from weatherapp.services.location.position import StaticLocationService
from weatherapp.services.weather.openweather import OpenWeatherClient


@pytest.fixture
def app_env(monkeypatch):
    monkeypatch.setenv("WEATHERAPP_DEVICE_LATITUDE", "48.8566")
    monkeypatch.setenv("WEATHERAPP_DEVICE_LONGITUDE", "2.3522")
    monkeypatch.setenv("WEATHERAPP_OPENWEATHER_API_KEY", "test-key")
    monkeypatch.setenv("WEATHERAPP_PLATFORM", "ios")
    monkeypatch.delenv("WEATHERAPP_RESOLVE_ON_STARTUP", raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest.mark.asyncio
async def test_startup_resolves_device_weather(app_env):
    app = create_app()

    with respx.mock:
        route = respx.get(OPENWEATHER_URL).mock(return_value=Response(200, json=openweather_payload()))

        async with app.router.lifespan_context(app):
            controller = app.state.controller
            assert isinstance(controller.permission_gate, AlwaysGrantedPermissionGate)
            assert isinstance(controller.position_provider.service, StaticLocationService)
            assert isinstance(controller.weather_client, OpenWeatherClient)
            assert controller.weather_client.http_client is get_http_client()

            await app.state.startup_task

            assert controller.phase == ResolutionPhase.SUCCESS
            assert controller.state.record.place_name == "Paris"
            assert controller.attempt == 1

        params = route.calls.last.request.url.params
        assert params["lat"] == "48.8566"
        assert params["lon"] == "2.3522"
        assert params["appid"] == "test-key"

    with pytest.raises(RuntimeError):
        get_http_client()


@pytest.mark.asyncio
async def test_startup_without_api_key_ends_in_fetch_error(app_env):
    app_env.delenv("WEATHERAPP_OPENWEATHER_API_KEY")
    app = create_app()

    with respx.mock(assert_all_called=False) as respx_mock:
        route = respx_mock.get(OPENWEATHER_URL).mock(return_value=Response(200, json=openweather_payload()))

        async with app.router.lifespan_context(app):
            await app.state.startup_task
            assert app.state.controller.state == ErrorState(message="Failed to fetch weather data.")

        assert not route.called


@pytest.mark.asyncio
async def test_startup_lookup_can_be_disabled(app_env):
    app_env.setenv("WEATHERAPP_RESOLVE_ON_STARTUP", "false")
    app = create_app()

    async with app.router.lifespan_context(app):
        assert app.state.startup_task is None
        assert app.state.controller.state == IdleState()


@pytest.mark.asyncio
async def test_shutdown_cancels_pending_startup_lookup(app_env):
    app = create_app()

    with respx.mock(assert_all_called=False) as respx_mock:
        respx_mock.get(OPENWEATHER_URL).mock(return_value=Response(200, json=openweather_payload()))

        async with app.router.lifespan_context(app):
            task = app.state.startup_task
            controller = app.state.controller
            # Let the lookup start and wait on the device position.
            await asyncio.sleep(0)
            assert controller.phase == ResolutionPhase.LOADING

        assert task.cancelled()
        assert controller.state == IdleState()
