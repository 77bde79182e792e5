from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from blog_api.core.config import get_settings
from blog_api.core.exceptions import UpstreamFailure
from blog_api.core.rate_limiter import rate_limit_ip
from blog_api.services.weather_service import DEFAULT_CITY, WeatherService, get_weather_service

router = APIRouter(tags=["weather"])


def weather_throttle(request: Request) -> None:
    rate_limit_ip(request, "weather", limit=get_settings().weather_rate_limit, window_seconds=60)


@router.get("/weather", dependencies=[Depends(weather_throttle)])
def get_weather(city: str = DEFAULT_CITY, service: WeatherService = Depends(get_weather_service)):
    try:
        data = service.get_weather(city)
    except UpstreamFailure as exc:
        return JSONResponse({"status": exc.status_code, "message": exc.message, "data": []}, status_code=exc.status_code)
    return JSONResponse(
        {"status": 200, "message": f"Weather data for {city} retrieved successfully", "data": data},
        status_code=200,
    )
