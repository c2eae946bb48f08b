from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import Callable, Protocol

import structlog
from pydantic import BaseModel, Field

from weatherapp.core.config import Settings
from weatherapp.core.errors import PositionErrorCode, PositionUnavailable
from weatherapp.schemas.weather import Coordinate


logger = structlog.get_logger(__name__)


class PositionOptions(BaseModel):
    enable_high_accuracy: bool = True
    timeout_ms: int = Field(default=30_000, ge=1)
    maximum_age_ms: int = Field(default=10_000, ge=0)
    distance_filter_m: float = Field(default=10.0, ge=0.0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PositionOptions":
        return cls(
            enable_high_accuracy=settings.position_high_accuracy,
            timeout_ms=settings.position_timeout_ms,
            maximum_age_ms=settings.position_maximum_age_ms,
            distance_filter_m=settings.position_distance_filter_m,
        )


class PositionError(BaseModel):
    code: PositionErrorCode
    message: str = ""


SuccessCallback = Callable[[Coordinate], None]
ErrorCallback = Callable[[PositionError], None]


class LocationService(Protocol):
    """Callback-style device location API."""

    def get_current_position(
        self,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        options: PositionOptions,
    ) -> None: ...


class StaticLocationService:
    """Reports a fixed device position, or POSITION_UNAVAILABLE when none is set."""

    def __init__(self, coordinate: Coordinate | None) -> None:
        self.coordinate = coordinate

    @classmethod
    def from_settings(cls, settings: Settings) -> "StaticLocationService":
        if settings.device_latitude is None or settings.device_longitude is None:
            return cls(None)
        return cls(Coordinate(latitude=settings.device_latitude, longitude=settings.device_longitude))

    def get_current_position(
        self,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        options: PositionOptions,
    ) -> None:
        if self.coordinate is None:
            on_error(PositionError(code=PositionErrorCode.POSITION_UNAVAILABLE, message="No device position configured"))
            return
        on_success(self.coordinate)


class PositionProvider:
    def __init__(self, service: LocationService, default_options: PositionOptions | None = None) -> None:
        self.service = service
        self.default_options = default_options or PositionOptions()

    async def get_current_coordinate(self, options: PositionOptions | None = None) -> Coordinate:
        """Resolve the device position once.

        Raises PositionUnavailable for every failure, including the timeout in
        ``options.timeout_ms`` when the service never calls back.
        """
        opts = options or self.default_options
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Coordinate] = loop.create_future()

        def on_success(coordinate: Coordinate) -> None:
            if not future.done():
                future.set_result(coordinate)

        def on_error(error: PositionError) -> None:
            if not future.done():
                future.set_exception(PositionUnavailable(error.code, error.message or None))

        # Services may call back from another thread, possibly after the loop is gone.
        def threadsafe(callback):
            def wrapper(value) -> None:
                if loop.is_closed():
                    logger.debug("geolocation_late_callback")
                    return
                with suppress(RuntimeError):
                    loop.call_soon_threadsafe(callback, value)

            return wrapper

        try:
            self.service.get_current_position(threadsafe(on_success), threadsafe(on_error), opts)
        except Exception as exc:
            logger.exception("geolocation_error", code=PositionErrorCode.INTERNAL_ERROR.name)
            raise PositionUnavailable(PositionErrorCode.INTERNAL_ERROR, str(exc)) from exc

        try:
            return await asyncio.wait_for(future, timeout=opts.timeout_ms / 1000)
        except asyncio.TimeoutError as exc:
            logger.warning("geolocation_error", code=PositionErrorCode.TIMEOUT.name, timeout_ms=opts.timeout_ms)
            raise PositionUnavailable(PositionErrorCode.TIMEOUT, f"No fix within {opts.timeout_ms} ms") from exc
        except PositionUnavailable as exc:
            logger.warning("geolocation_error", code=exc.code.name, detail=exc.detail)
            raise
