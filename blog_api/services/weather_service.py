"""
Current weather lookups against an OpenWeatherMap-compatible API.

Successful lookups are cached per city for ``cache_ttl`` seconds; failures are
never cached, so the next request retries the upstream.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Optional

import httpx

from blog_api.core.cache import TTLCache
from blog_api.core.config import get_settings
from blog_api.core.exceptions import UpstreamFailure

logger = logging.getLogger(__name__)

DEFAULT_CITY = "Perth"


class WeatherService:
    def __init__(
        self,
        api_key: str,
        base_url: str,
        cache_ttl: int = 900,
        timeout: float = 10,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not api_key:
            logger.error("Weather API key is missing. Set WEATHER_API_KEY.")
            raise RuntimeError("Weather API key is missing.")
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.cache = TTLCache(cache_ttl)
        self._transport = transport

    def get_weather(self, city: str = DEFAULT_CITY) -> dict[str, Any]:
        return self.cache.remember(f"weather_{city}", lambda: self._fetch(city))

    def _fetch(self, city: str) -> dict[str, Any]:
        params = {"q": city, "appid": self.api_key, "units": "metric"}
        try:
            with httpx.Client(transport=self._transport, timeout=self.timeout) as client:
                response = client.get(self.base_url, params=params)
        except httpx.HTTPError as exc:
            logger.error("Weather request for city %r failed: %s", city, exc)
            raise UpstreamFailure() from exc

        if not response.is_success:
            logger.error("Weather API failed for city %r: status=%s body=%s", city, response.status_code, response.text)
            raise UpstreamFailure()
        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Weather API returned an undecodable body for city %r: %s", city, response.text)
            raise UpstreamFailure() from exc
        if not isinstance(payload, dict):
            logger.error("Weather API returned an unexpected body for city %r: %s", city, response.text)
            raise UpstreamFailure()
        return self.summarise(payload, city)

    @staticmethod
    def summarise(payload: dict[str, Any], city: str) -> dict[str, Any]:
        main = payload.get("main") or {}
        wind = payload.get("wind") or {}
        conditions = payload.get("weather") or [{}]
        return {
            "city": payload.get("name") or city,
            "temperature": main.get("temp"),
            "humidity": main.get("humidity"),
            "weather": (conditions[0] or {}).get("description"),
            "wind_speed": wind.get("speed"),
        }


@lru_cache
def get_weather_service() -> WeatherService:
    settings = get_settings()
    return WeatherService(
        api_key=settings.weather_api_key,
        base_url=settings.weather_base_url,
        cache_ttl=settings.weather_cache_ttl,
        timeout=settings.weather_timeout,
    )
