from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from weatherapp.schemas.weather import WeatherRecord


class ResolutionPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class IdleState(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: Literal[ResolutionPhase.IDLE] = ResolutionPhase.IDLE


class LoadingState(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: Literal[ResolutionPhase.LOADING] = ResolutionPhase.LOADING


class SuccessState(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: Literal[ResolutionPhase.SUCCESS] = ResolutionPhase.SUCCESS
    record: WeatherRecord


class ErrorState(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: Literal[ResolutionPhase.ERROR] = ResolutionPhase.ERROR
    message: str


ResolutionState = Annotated[
    Union[IdleState, LoadingState, SuccessState, ErrorState],
    Field(discriminator="phase"),
]


class ResolutionStateResponse(BaseModel):
    phase: ResolutionPhase
    record: WeatherRecord | None = None
    message: str | None = None
    search_text: str = ""
    attempt: int = 0


class SearchTextUpdate(BaseModel):
    text: str = Field(default="", max_length=200)


class SearchRequest(BaseModel):
    query: str = Field(default="", max_length=200)
