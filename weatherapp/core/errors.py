from __future__ import annotations

from enum import IntEnum


PERMISSION_DENIED_MESSAGE = "Location permission denied."
POSITION_UNAVAILABLE_MESSAGE = "Unable to retrieve location. Please check your GPS settings."
LOCATION_NOT_FOUND_MESSAGE = "Location not found."
FETCH_FAILED_MESSAGE = "Failed to fetch weather data."


class PositionErrorCode(IntEnum):
    """Error codes reported by the device location service."""

    INTERNAL_ERROR = -1
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3
    PLAY_SERVICE_NOT_AVAILABLE = 4
    SETTINGS_NOT_SATISFIED = 5


class ResolutionError(Exception):
    """Base class for errors that end a lookup attempt.

    ``user_message`` is the fixed text shown to the user. ``detail`` is for logs only.
    """

    user_message: str = FETCH_FAILED_MESSAGE

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.user_message)
        self.detail = detail


class PermissionDenied(ResolutionError):
    user_message = PERMISSION_DENIED_MESSAGE


class PositionUnavailable(ResolutionError):
    user_message = POSITION_UNAVAILABLE_MESSAGE

    def __init__(self, code: PositionErrorCode, detail: str | None = None) -> None:
        super().__init__(detail or code.name.lower())
        self.code = code


class LocationNotFound(ResolutionError):
    user_message = LOCATION_NOT_FOUND_MESSAGE


class FetchFailed(ResolutionError):
    user_message = FETCH_FAILED_MESSAGE
