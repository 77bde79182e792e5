from __future__ import annotations

import httpx
import pytest

from blog_api.core.config import get_settings
from blog_api.core.exceptions import UpstreamFailure
from blog_api.services.weather_service import WeatherService, get_weather_service

BASE_URL = "https://api.openweathermap.org/data/2.5/weather"
FAILURE = {"status": 400, "message": "Failed to fetch weather data", "data": []}


def _sunny(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "weather": [{"description": "clear sky"}],
            "main": {"temp": 22.5, "humidity": 65},
            "wind": {"speed": 3.2},
            "name": request.url.params["q"],
        },
    )


def _nothing_to_geocode(request: httpx.Request) -> httpx.Response:
    return httpx.Response(400, json={"cod": 400, "message": "Nothing to geocode"})


class Upstream:
    """Mock transport that records requests and replays scripted handlers."""

    def __init__(self, *handlers):
        self.handlers = list(handlers)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.handlers.pop(0) if len(self.handlers) > 1 else self.handlers[0]
        return handler(request)


@pytest.fixture()
def upstream(client):
    def _install(*handlers) -> Upstream:
        recorder = Upstream(*handlers)
        service = WeatherService("test-key", BASE_URL, transport=httpx.MockTransport(recorder))
        client.app.dependency_overrides[get_weather_service] = lambda: service
        return recorder

    yield _install
    client.app.dependency_overrides.clear()


@pytest.mark.parametrize("city", ["Perth", "Sydney", "Melbourne"])
def test_weather_success(client, upstream, city):
    recorder = upstream(_sunny)

    response = client.get("/weather", params={"city": city})

    assert response.status_code == 200
    assert response.json() == {
        "status": 200,
        "message": f"Weather data for {city} retrieved successfully",
        "data": {"city": city, "temperature": 22.5, "humidity": 65, "weather": "clear sky", "wind_speed": 3.2},
    }
    params = recorder.requests[0].url.params
    assert params["q"] == city
    assert params["appid"] == "test-key"
    assert params["units"] == "metric"


def test_weather_defaults_to_perth(client, upstream):
    recorder = upstream(_sunny)

    response = client.get("/weather")

    assert response.json()["data"]["city"] == "Perth"
    assert recorder.requests[0].url.params["q"] == "Perth"


@pytest.mark.parametrize("city", ["", "InvalidCity123"])
def test_weather_upstream_failure(client, upstream, city):
    recorder = upstream(_nothing_to_geocode)

    response = client.get("/weather", params={"city": city})

    assert response.status_code == 400
    assert response.json() == FAILURE
    assert recorder.requests[0].url.params["q"] == city


def test_failures_are_not_cached(client, upstream):
    recorder = upstream(_nothing_to_geocode, _sunny)

    first = client.get("/weather", params={"city": "Perth"})
    second = client.get("/weather", params={"city": "Perth"})

    assert first.status_code == 400
    assert second.status_code == 200
    assert len(recorder.requests) == 2


def test_successes_are_cached_per_city(client, upstream):
    recorder = upstream(_sunny)

    client.get("/weather", params={"city": "Perth"})
    client.get("/weather", params={"city": "Perth"})
    client.get("/weather", params={"city": "Sydney"})

    assert [request.url.params["q"] for request in recorder.requests] == ["Perth", "Sydney"]


def test_weather_is_rate_limited(client, upstream, monkeypatch):
    monkeypatch.setenv("WEATHER_RATE_LIMIT", "2")
    get_settings.cache_clear()
    upstream(_sunny)

    codes = [client.get("/weather").status_code for _ in range(3)]

    assert codes == [200, 200, 429]
    limited = client.get("/weather")
    assert "Retry-After" in limited.headers


def test_transport_errors_become_upstream_failures():
    def _boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = WeatherService("test-key", BASE_URL, transport=httpx.MockTransport(_boom))

    with pytest.raises(UpstreamFailure):
        service.get_weather("Perth")


def test_undecodable_body_is_a_failure():
    service = WeatherService(
        "test-key", BASE_URL, transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    )

    with pytest.raises(UpstreamFailure):
        service.get_weather("Perth")


def test_missing_api_key():
    with pytest.raises(RuntimeError):
        WeatherService("", BASE_URL)
