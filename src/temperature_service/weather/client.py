"""HTTP clients for the forecast APIs.

Each client adapts its provider's payload to a list of ``HourlySample`` in
local wall-clock time, so the extractor never sees provider-specific shapes.
"""

import logging
import zoneinfo
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError
from timezonefinder import TimezoneFinder

from temperature_service.config import (
    FORECAST_DAYS, FORECAST_PROVIDER, HTTP_TIMEOUT_SECONDS,
    OPEN_METEO_URL, USER_AGENT, YR_API_BASE_URL
)
from temperature_service.weather.errors import InvalidInputError, UpstreamError
from temperature_service.weather.models import (
    HourlySample, OpenMeteoForecastResponse, YrForecastResponse
)

logger = logging.getLogger(__name__)

COORDINATE_PRECISION = 4


class ForecastProvider(ABC):
    """Base class for async forecast API clients."""

    name = "forecast"

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = HTTP_TIMEOUT_SECONDS
    ):
        """Initialize the forecast client.

        Args:
            base_url: Forecast endpoint URL
            client: Shared HTTP client (creates one if None)
            timeout: Request timeout in seconds for a created client
        """
        self.base_url = base_url
        self.client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout
        )

    async def fetch_hourly(self, lat: float, lon: float) -> List[HourlySample]:
        """Fetch the hourly series for coordinates.

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees

        Returns:
            Hourly samples in provider order

        Raises:
            UpstreamError: If the API is unreachable, fails or returns malformed data
        """
        if not (-90 <= lat <= 90) or not (-180 <= lon <= 180):
            raise InvalidInputError(f"Invalid coordinates: lat={lat}, lon={lon}")

        lat = round(lat, COORDINATE_PRECISION)
        lon = round(lon, COORDINATE_PRECISION)
        logger.info(f"Fetching {self.name} forecast for lat={lat}, lon={lon}")

        data = await self._get_json(self._params(lat, lon))
        try:
            samples = self._parse(data, lat, lon)
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid {self.name} response format: {e}")
            raise UpstreamError(f"Invalid response from {self.name} forecast API") from e

        logger.info(f"Fetched {len(samples)} hourly samples from {self.name}")
        return samples

    async def _get_json(self, params: Dict[str, Any]) -> Any:
        try:
            response = await self.client.get(self.base_url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error from {self.name} API: {e.response.status_code} - {e.response.text}")
            raise UpstreamError(
                f"{self.name} forecast API returned status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Request error to {self.name} API: {e}")
            raise UpstreamError(f"{self.name} forecast API is unreachable") from e
        except ValueError as e:
            logger.error(f"Non-JSON response from {self.name} API: {e}")
            raise UpstreamError(f"Invalid response from {self.name} forecast API") from e

    @abstractmethod
    def _params(self, lat: float, lon: float) -> Dict[str, Any]:
        """Query parameters for the forecast request."""

    @abstractmethod
    def _parse(self, data: Any, lat: float, lon: float) -> List[HourlySample]:
        """Convert the decoded payload to hourly samples."""

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


class OpenMeteoClient(ForecastProvider):
    """Client for the Open-Meteo forecast API.

    Requests ``timezone=auto`` so timestamps arrive in the location's local time.
    """

    name = "open-meteo"

    def __init__(
        self,
        base_url: str = OPEN_METEO_URL,
        client: Optional[httpx.AsyncClient] = None,
        forecast_days: int = FORECAST_DAYS
    ):
        super().__init__(base_url, client)
        self.forecast_days = forecast_days

    def _params(self, lat: float, lon: float) -> Dict[str, Any]:
        return {
            "latitude": lat,
            "longitude": lon,
            "hourly": "temperature_2m,weather_code",
            "timezone": "auto",
            "forecast_days": self.forecast_days,
        }

    def _parse(self, data: Any, lat: float, lon: float) -> List[HourlySample]:
        hourly = OpenMeteoForecastResponse(**data).hourly
        codes = hourly.weather_code

        samples = []
        for idx, timestamp in enumerate(hourly.time):
            samples.append(HourlySample(
                timestamp=datetime.fromisoformat(timestamp),
                temperature=hourly.temperature_2m[idx] if idx < len(hourly.temperature_2m) else None,
                condition_code=codes[idx] if idx < len(codes) else None,
            ))
        return samples


class YrWeatherClient(ForecastProvider):
    """Client for MET Norway's Locationforecast (yr.no) API.

    Timestamps are UTC; they are converted to the local zone of the
    coordinates before the tzinfo is dropped.
    """

    name = "yr.no"

    def __init__(
        self,
        base_url: str = YR_API_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timezone_resolver: Optional[Callable[[float, float], str]] = None
    ):
        """Initialize the yr.no client.

        Args:
            base_url: Locationforecast endpoint URL
            client: Shared HTTP client (creates one if None)
            timezone_resolver: Callable mapping (lat, lon) to an IANA zone name
        """
        super().__init__(base_url, client)
        self._timezone_finder: Optional[TimezoneFinder] = None
        self.timezone_resolver = timezone_resolver or self._find_timezone

    def _find_timezone(self, lat: float, lon: float) -> str:
        if self._timezone_finder is None:
            # Reuse instance for performance
            self._timezone_finder = TimezoneFinder()
        timezone = self._timezone_finder.timezone_at(lng=lon, lat=lat)
        if not timezone:
            logger.warning(f"No timezone found for ({lat}, {lon}), defaulting to UTC")
            return "UTC"
        return timezone

    def _params(self, lat: float, lon: float) -> Dict[str, Any]:
        return {"lat": lat, "lon": lon}

    def _parse(self, data: Any, lat: float, lon: float) -> List[HourlySample]:
        forecast = YrForecastResponse(**data)
        timeseries = forecast.properties.get("timeseries", [])
        local_zone = zoneinfo.ZoneInfo(self.timezone_resolver(lat, lon))

        samples = []
        for entry in timeseries:
            utc_time = datetime.fromisoformat(entry["time"].replace("Z", "+00:00"))
            local_time = utc_time.astimezone(local_zone).replace(tzinfo=None)
            samples.append(HourlySample(
                timestamp=local_time,
                temperature=entry["data"]["instant"]["details"].get("air_temperature"),
                condition_code=self._symbol_code(entry["data"]),
            ))
        return samples

    @staticmethod
    def _symbol_code(data: Dict[str, Any]) -> Optional[str]:
        for period in ("next_1_hours", "next_6_hours", "next_12_hours"):
            symbol = data.get(period, {}).get("summary", {}).get("symbol_code")
            if symbol:
                return symbol
        return None


def create_forecast_provider(
    provider: str = FORECAST_PROVIDER,
    client: Optional[httpx.AsyncClient] = None
) -> ForecastProvider:
    """Build the configured forecast client.

    Args:
        provider: ``open-meteo`` or ``yr``
        client: Shared HTTP client

    Raises:
        ValueError: If the provider name is not known
    """
    if provider == "open-meteo":
        return OpenMeteoClient(client=client)
    if provider in ("yr", "yr.no"):
        return YrWeatherClient(client=client)
    raise ValueError(f"Unknown forecast provider: {provider}")
