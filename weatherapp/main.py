from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, suppress

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from weatherapp.api.v1.router import api_v1_router
from weatherapp.core.config import Settings, get_settings
from weatherapp.core.http import create_http_client, set_http_client
from weatherapp.core.logger import setup_logging
from weatherapp.services.location.permission import build_permission_gate
from weatherapp.services.location.position import PositionOptions, PositionProvider, StaticLocationService
from weatherapp.services.resolution import ResolutionController
from weatherapp.services.weather.openweather import OpenWeatherClient


logger = structlog.get_logger(__name__)


def build_controller(settings: Settings, http_client) -> ResolutionController:
    options = PositionOptions.from_settings(settings)
    return ResolutionController(
        permission_gate=build_permission_gate(settings),
        position_provider=PositionProvider(StaticLocationService.from_settings(settings), options),
        weather_client=OpenWeatherClient.from_settings(http_client, settings),
        position_options=options,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)

    if settings.api_key is None:
        logger.warning("openweather_api_key_missing", hint="set WEATHERAPP_OPENWEATHER_API_KEY")

    # Setup HTTP client
    client = create_http_client(settings)
    set_http_client(client)

    controller = build_controller(settings, client)
    app.state.controller = controller

    startup_task = None
    if settings.resolve_on_startup:
        startup_task = asyncio.create_task(controller.start())
    app.state.startup_task = startup_task

    try:
        yield
    finally:
        if startup_task is not None and not startup_task.done():
            startup_task.cancel()
            with suppress(asyncio.CancelledError):
                await startup_task
        await client.aclose()
        set_http_client(None)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="weather app api",
        version="0.1.0",
        lifespan=lifespan,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api_v1_router, prefix="/api/v1")
    return app


app = create_app()
