from __future__ import annotations

from enum import Enum
from typing import Awaitable, Callable, Protocol

import structlog
from pydantic import BaseModel

from weatherapp.core.config import Settings


logger = structlog.get_logger(__name__)


class PermissionResponse(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    NEVER_ASK_AGAIN = "never_ask_again"


class PermissionRequest(BaseModel):
    title: str
    message: str
    button_neutral: str
    button_negative: str
    button_positive: str


LOCATION_PERMISSION_REQUEST = PermissionRequest(
    title="Weather App Location Permission",
    message="Weather App needs access to your location.",
    button_neutral="Ask Me Later",
    button_negative="Cancel",
    button_positive="OK",
)


Prompter = Callable[[PermissionRequest], Awaitable[PermissionResponse]]


class PermissionGate(Protocol):
    async def request_location_permission(self) -> bool: ...


class AlwaysGrantedPermissionGate:
    """Platforms without a runtime permission model; location is assumed available."""

    async def request_location_permission(self) -> bool:
        return True


class PromptPermissionGate:
    """Asks the user through ``prompter``. Only an explicit grant counts."""

    def __init__(self, prompter: Prompter, request: PermissionRequest = LOCATION_PERMISSION_REQUEST) -> None:
        self.prompter = prompter
        self.request = request

    async def request_location_permission(self) -> bool:
        response = await self.prompter(self.request)
        granted = response == PermissionResponse.GRANTED
        if not granted:
            logger.info("location_permission_refused", response=response.value)
        return granted


class ConfiguredPrompter:
    """Answers permission prompts from settings when no user is there to ask."""

    def __init__(self, response: PermissionResponse) -> None:
        self.response = response

    async def __call__(self, request: PermissionRequest) -> PermissionResponse:
        logger.debug("location_permission_prompt", title=request.title, response=self.response.value)
        return self.response


def build_permission_gate(settings: Settings, prompter: Prompter | None = None) -> PermissionGate:
    if settings.platform == "android":
        if prompter is None:
            prompter = ConfiguredPrompter(PermissionResponse(settings.location_permission))
        return PromptPermissionGate(prompter)
    return AlwaysGrantedPermissionGate()
