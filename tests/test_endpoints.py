"""Integration tests for the HTTP routes."""

import pytest
from fastapi.testclient import TestClient

from conftest import StubForecastProvider, StubGeocoder
from temperature_service.config import DEFAULT_LOCATION_NAME
from temperature_service.main import create_app
from temperature_service.weather.errors import UpstreamError
from temperature_service.weather.service import TemperatureService


@pytest.fixture
def client(service):
    app = create_app(service=service, rate_limit_enabled=False)
    with TestClient(app) as test_client:
        yield test_client


def client_for(service: TemperatureService) -> TestClient:
    return TestClient(create_app(service=service, rate_limit_enabled=False))


class TestTemperatureRoute:
    """Tests for GET /api/temperature."""

    def test_default_location(self, client) -> None:
        response = client.get("/api/temperature")

        assert response.status_code == 200
        body = response.json()
        assert body["location"]["name"] == DEFAULT_LOCATION_NAME
        assert body["from_cache"] is False
        assert "produced_at" in body
        assert body["readings"][0] == {
            "date": "2026-01-20",
            "time": "14:00",
            "temperature": 14.0,
            "unit": "Celsius",
            "description": "Partly cloudy",
        }

    def test_location_name(self, client, geocoder) -> None:
        response = client.get("/api/temperature", params={"location": "Paris"})

        assert response.status_code == 200
        assert response.json()["location"]["name"] == "Paris, France"
        assert geocoder.calls == [("Paris", 1)]

    def test_coordinates(self, client, forecast_provider) -> None:
        response = client.get("/api/temperature", params={"lat": 48.8566, "lon": 2.3522})

        assert response.status_code == 200
        location = response.json()["location"]
        assert location["latitude"] == 48.8566
        assert location["longitude"] == 2.3522
        assert location["name"] is None
        assert forecast_provider.calls == [(48.8566, 2.3522)]

    def test_location_takes_precedence_over_coordinates(self, client, geocoder) -> None:
        response = client.get("/api/temperature", params={"location": "Paris", "lat": 1, "lon": 2})

        assert response.status_code == 200
        assert geocoder.calls == [("Paris", 1)]

    def test_cached_and_refresh(self, client) -> None:
        assert client.get("/api/temperature").json()["from_cache"] is False
        assert client.get("/api/temperature").json()["from_cache"] is True
        assert client.get("/api/temperature", params={"refresh": "true"}).json()["from_cache"] is False

    def test_only_latitude_is_invalid(self, client, forecast_provider) -> None:
        response = client.get("/api/temperature", params={"lat": 44.8})

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInput"
        assert forecast_provider.calls == []

    def test_out_of_range_latitude_is_invalid(self, client) -> None:
        response = client.get("/api/temperature", params={"lat": 120, "lon": 20})

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInput"

    def test_unknown_location_is_not_found(self, forecast_provider, cache, clock) -> None:
        service = TemperatureService(forecast_provider, StubGeocoder([]), cache, clock)

        with client_for(service) as client:
            response = client.get("/api/temperature", params={"location": "XyZ-no-such-place"})

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "NotFound"
        assert "XyZ-no-such-place" in body["message"]

    def test_upstream_failure(self, geocoder, cache, clock) -> None:
        provider = StubForecastProvider(error=UpstreamError("open-meteo forecast API is unreachable"))
        service = TemperatureService(provider, geocoder, cache, clock)

        with client_for(service) as client:
            response = client.get("/api/temperature")

        assert response.status_code == 502
        assert response.json() == {
            "error": "UpstreamFailure",
            "message": "open-meteo forecast API is unreachable",
        }

    def test_legacy_default_route(self, client) -> None:
        response = client.get("/api/belgrade/temperature")

        assert response.status_code == 200
        assert response.json()["location"]["name"] == DEFAULT_LOCATION_NAME


class TestSearchRoute:
    """Tests for GET /api/search."""

    def test_returns_results_and_count(self, client) -> None:
        response = client.get("/api/search", params={"q": "Paris"})

        assert response.status_code == 200
        assert response.json() == {
            "query": "Paris",
            "results": [
                {"name": "Paris", "country": "France", "latitude": 48.8566, "longitude": 2.3522}
            ],
            "count": 1,
        }

    def test_empty_results(self, forecast_provider, cache, clock) -> None:
        service = TemperatureService(forecast_provider, StubGeocoder([]), cache, clock)

        with client_for(service) as client:
            response = client.get("/api/search", params={"q": "Nowhere"})

        assert response.status_code == 200
        assert response.json()["count"] == 0

    @pytest.mark.parametrize("params", [{"q": "a"}, {"q": " b "}, {}])
    def test_short_query_rejected_before_geocoding(self, client, geocoder, params) -> None:
        response = client.get("/api/search", params=params)

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInput"
        assert geocoder.calls == []


class TestMiscRoutes:
    """Tests for health, docs, front end and unknown routes."""

    def test_health(self, client) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "timestamp" in response.json()

    def test_api_docs(self, client) -> None:
        body = client.get("/api/docs").json()

        assert body["name"] == "Weather Temperature Service"
        assert body["version"] == "2.0.0"
        assert "GET /api/search" in body["endpoints"]

    def test_web_ui(self, client) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Weather Temperature Service" in response.text

    def test_unknown_endpoint(self, client) -> None:
        response = client.get("/unknown")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"


def test_shutdown_closes_service(service, forecast_provider, geocoder) -> None:
    with client_for(service):
        pass

    assert forecast_provider.closed
    assert geocoder.closed
