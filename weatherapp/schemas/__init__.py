from __future__ import annotations

from weatherapp.schemas.resolution import (
    ErrorState,
    IdleState,
    LoadingState,
    ResolutionPhase,
    ResolutionState,
    SuccessState,
)
from weatherapp.schemas.weather import Coordinate, WeatherRecord

__all__ = [
    "Coordinate",
    "WeatherRecord",
    "ResolutionPhase",
    "ResolutionState",
    "IdleState",
    "LoadingState",
    "SuccessState",
    "ErrorState",
]
