from __future__ import annotations

import asyncio
import itertools
from typing import Callable, Protocol

import structlog

from weatherapp.core.errors import FETCH_FAILED_MESSAGE, PermissionDenied, ResolutionError
from weatherapp.schemas.resolution import (
    ErrorState,
    IdleState,
    LoadingState,
    ResolutionPhase,
    ResolutionState,
    SuccessState,
)
from weatherapp.schemas.weather import Coordinate, WeatherRecord
from weatherapp.services.location.permission import PermissionGate
from weatherapp.services.location.position import PositionOptions, PositionProvider


logger = structlog.get_logger(__name__)


class WeatherClient(Protocol):
    async def fetch_by_coordinate(self, coordinate: Coordinate) -> WeatherRecord: ...

    async def fetch_by_name(self, name: str) -> WeatherRecord: ...


StateListener = Callable[[ResolutionState], None]


class ResolutionController:
    """Owns the weather lookup state shown to the user.

    Two flows feed it: locate-then-fetch and search-by-name. Each call takes a
    new attempt token; a flow only applies its outcome while its token is the
    latest, so when lookups overlap the most recently started one decides the
    final state.
    """

    def __init__(
        self,
        permission_gate: PermissionGate,
        position_provider: PositionProvider,
        weather_client: WeatherClient,
        position_options: PositionOptions | None = None,
    ) -> None:
        self.permission_gate = permission_gate
        self.position_provider = position_provider
        self.weather_client = weather_client
        self.position_options = position_options
        self._state: ResolutionState = IdleState()
        self._search_text = ""
        self._attempts = itertools.count(1)
        self._attempt = 0
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ResolutionState:
        return self._state

    @property
    def phase(self) -> ResolutionPhase:
        return self._state.phase

    @property
    def attempt(self) -> int:
        return self._attempt

    @property
    def search_text(self) -> str:
        return self._search_text

    def set_search_text(self, text: str) -> None:
        self._search_text = text

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start(self) -> ResolutionState:
        return await self.locate()

    async def refresh(self) -> ResolutionState:
        if self._search_text.strip():
            return await self.search_by_name(self._search_text)
        return await self.locate()

    async def search_by_name(self, text: str) -> ResolutionState:
        self._search_text = text
        query = text.strip()
        if not query:
            return await self.locate()

        previous = self._state
        token = self._begin()
        log = logger.bind(attempt=token, flow="name")
        try:
            record = await self.weather_client.fetch_by_name(query)
        except asyncio.CancelledError:
            self._cancel(token, previous, log)
            raise
        except Exception as exc:
            self._fail(token, exc, log)
        else:
            self._succeed(token, record, log)
        return self._state

    async def locate(self) -> ResolutionState:
        previous = self._state
        token = self._begin()
        log = logger.bind(attempt=token, flow="coordinate")
        try:
            if not await self.permission_gate.request_location_permission():
                raise PermissionDenied("Location permission not granted")
            coordinate = await self.position_provider.get_current_coordinate(self.position_options)
            log.debug("position_resolved", latitude=coordinate.latitude, longitude=coordinate.longitude)
            record = await self.weather_client.fetch_by_coordinate(coordinate)
        except asyncio.CancelledError:
            self._cancel(token, previous, log)
            raise
        except Exception as exc:
            self._fail(token, exc, log)
        else:
            self._succeed(token, record, log)
        return self._state

    def _begin(self) -> int:
        self._attempt = next(self._attempts)
        self._set_state(LoadingState())
        return self._attempt

    def _succeed(self, token: int, record: WeatherRecord, log: structlog.stdlib.BoundLogger) -> None:
        if token != self._attempt:
            log.info("stale_result_discarded", latest=self._attempt)
            return
        self._set_state(SuccessState(record=record))

    def _fail(self, token: int, exc: Exception, log: structlog.stdlib.BoundLogger) -> None:
        if isinstance(exc, ResolutionError):
            log.warning("lookup_failed", error=type(exc).__name__, detail=exc.detail)
            message = exc.user_message
        else:
            log.exception("lookup_crashed")
            message = FETCH_FAILED_MESSAGE
        if token != self._attempt:
            log.info("stale_result_discarded", latest=self._attempt)
            return
        self._set_state(ErrorState(message=message))

    def _cancel(self, token: int, previous: ResolutionState, log: structlog.stdlib.BoundLogger) -> None:
        # A cancelled lookup puts back what was shown before it started.
        log.info("lookup_cancelled")
        if token != self._attempt:
            return
        if isinstance(previous, LoadingState):
            previous = IdleState()
        self._set_state(previous)

    def _set_state(self, state: ResolutionState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
