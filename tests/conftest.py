"""Shared pytest fixtures for temperature service tests."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from temperature_service.weather.cache import CoordinateCache
from temperature_service.weather.models import HourlySample, LocationCandidate
from temperature_service.weather.service import TemperatureService


class FakeClock:
    """Controllable clock; advance it instead of sleeping."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 1, 20, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StubGeocoder:
    """Geocoder returning canned candidates and recording queries."""

    def __init__(self, candidates: Optional[List[LocationCandidate]] = None):
        self.candidates = candidates or []
        self.calls: List[tuple] = []
        self.closed = False

    async def search(self, query: str, limit: Optional[int] = None) -> List[LocationCandidate]:
        self.calls.append((query, limit))
        return self.candidates[:limit] if limit else list(self.candidates)

    async def aclose(self):
        self.closed = True


class StubForecastProvider:
    """Forecast provider returning a canned hourly series."""

    def __init__(self, samples: Optional[List[HourlySample]] = None, error: Optional[Exception] = None):
        self.samples = samples if samples is not None else hourly_series("2026-01-20", days=3)
        self.error = error
        self.calls: List[tuple] = []
        self.closed = False

    async def fetch_hourly(self, lat: float, lon: float) -> List[HourlySample]:
        self.calls.append((lat, lon))
        if self.error:
            raise self.error
        return self.samples

    async def aclose(self):
        self.closed = True


def sample(timestamp: str, temperature: Optional[float] = 10.0, code=None) -> HourlySample:
    return HourlySample(
        timestamp=datetime.fromisoformat(timestamp),
        temperature=temperature,
        condition_code=code,
    )


def hourly_series(start_date: str, days: int = 1) -> List[HourlySample]:
    """24 samples per day; temperature = hour + day / 10, WMO code 2."""
    start = datetime.fromisoformat(start_date)
    samples = []
    for day in range(days):
        for hour in range(24):
            samples.append(HourlySample(
                timestamp=start + timedelta(days=day, hours=hour),
                temperature=hour + day / 10,
                condition_code=2,
            ))
    return samples


PARIS = LocationCandidate(name="Paris", country="France", latitude=48.8566, longitude=2.3522)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> CoordinateCache:
    return CoordinateCache(ttl=timedelta(hours=1), clock=clock)


@pytest.fixture
def geocoder() -> StubGeocoder:
    return StubGeocoder([PARIS])


@pytest.fixture
def forecast_provider() -> StubForecastProvider:
    return StubForecastProvider()


@pytest.fixture
def service(forecast_provider, geocoder, cache, clock) -> TemperatureService:
    return TemperatureService(
        forecast_provider=forecast_provider,
        geocoding_service=geocoder,
        cache=cache,
        clock=clock,
    )
