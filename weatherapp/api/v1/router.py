from fastapi import APIRouter

from weatherapp.api.v1.endpoints.health import router as health_router
from weatherapp.api.v1.endpoints.resolution import router as resolution_router
from weatherapp.api.v1.endpoints.weather import router as weather_router


api_v1_router = APIRouter()
api_v1_router.include_router(health_router)
api_v1_router.include_router(weather_router, prefix="/weather", tags=["weather"])
api_v1_router.include_router(resolution_router, prefix="/weather", tags=["resolution"])
