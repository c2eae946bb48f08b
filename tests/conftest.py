import asyncio

import pytest

from weatherapp.schemas.weather import Coordinate, WeatherRecord
from weatherapp.services.location.position import PositionError, PositionProvider
from weatherapp.services.resolution import ResolutionController


PARIS = Coordinate(latitude=48.8566, longitude=2.3522)


def openweather_payload(name="Paris", country="FR", temp=18.4, description="light rain"):
    return {
        "coord": {"lon": 2.3488, "lat": 48.8534},
        "weather": [{"id": 500, "main": "Rain", "description": description, "icon": "10d"}],
        "main": {"temp": temp, "feels_like": 17.9, "pressure": 1012, "humidity": 72},
        "sys": {"country": country, "sunrise": 1700000000, "sunset": 1700040000},
        "name": name,
        "cod": 200,
    }


class StubPermissionGate:
    def __init__(self, granted=True):
        self.granted = granted
        self.calls = 0

    async def request_location_permission(self):
        self.calls += 1
        return self.granted


class StubLocationService:
    def __init__(self, coordinate=PARIS, error_code=None, respond=True):
        self.coordinate = coordinate
        self.error_code = error_code
        self.respond = respond
        self.calls = []

    def get_current_position(self, on_success, on_error, options):
        self.calls.append(options)
        if not self.respond:
            return
        if self.error_code is not None:
            on_error(PositionError(code=self.error_code, message=f"stub {self.error_code.name}"))
        else:
            on_success(self.coordinate)


class StubWeatherClient:
    def __init__(self, record=None, error=None):
        self.record = record or WeatherRecord(
            place_name="Paris",
            country_code="FR",
            temperature_celsius=18.4,
            condition_description="light rain",
        )
        self.error = error
        self.coordinate_calls = []
        self.name_calls = []

    async def fetch_by_coordinate(self, coordinate):
        self.coordinate_calls.append(coordinate)
        if self.error:
            raise self.error
        return self.record

    async def fetch_by_name(self, name):
        self.name_calls.append(name)
        if self.error:
            raise self.error
        return self.record


class GatedWeatherClient(StubWeatherClient):
    """Holds each name lookup until its gate is opened."""

    def __init__(self, records):
        super().__init__()
        self.records = records
        self.gates = {name: asyncio.Event() for name in records}

    async def fetch_by_name(self, name):
        self.name_calls.append(name)
        await self.gates[name].wait()
        return self.records[name]


@pytest.fixture
def permission_gate():
    return StubPermissionGate()


@pytest.fixture
def location_service():
    return StubLocationService()


@pytest.fixture
def weather_client():
    return StubWeatherClient()


@pytest.fixture
def make_controller(permission_gate, location_service, weather_client):
    def factory(gate=None, service=None, client=None, options=None):
        return ResolutionController(
            permission_gate=gate or permission_gate,
            position_provider=PositionProvider(service or location_service),
            weather_client=client or weather_client,
            position_options=options,
        )

    return factory
