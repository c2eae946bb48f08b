from fastapi import APIRouter, Depends, HTTPException, Query

from weatherapp.api.v1.deps import get_weather_client
from weatherapp.core.errors import FetchFailed, LocationNotFound
from weatherapp.schemas.weather import Coordinate, WeatherRecord
from weatherapp.services.weather.openweather import OpenWeatherClient


router = APIRouter()


@router.get("/current", response_model=WeatherRecord)
async def current_weather(
    lat: float | None = Query(None, ge=-90, le=90),
    lon: float | None = Query(None, ge=-180, le=180),
    q: str | None = Query(None, min_length=1, max_length=200),
    client: OpenWeatherClient = Depends(get_weather_client),
):
    by_coordinate = lat is not None and lon is not None
    if by_coordinate == bool(q and q.strip()) or (lat is None) != (lon is None):
        raise HTTPException(status_code=422, detail="Pass either lat and lon, or q")

    try:
        if by_coordinate:
            return await client.fetch_by_coordinate(Coordinate(latitude=lat, longitude=lon))
        return await client.fetch_by_name(q)
    except LocationNotFound as exc:
        raise HTTPException(status_code=404, detail=exc.user_message)
    except FetchFailed as exc:
        raise HTTPException(status_code=502, detail=exc.user_message)
