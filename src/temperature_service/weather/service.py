"""Temperature service orchestrating geocoding, forecasting and caching."""

import logging
from typing import List, Optional

from temperature_service.config import (
    DEFAULT_LAT, DEFAULT_LON, DEFAULT_LOCATION_NAME, TARGET_HOUR
)
from temperature_service.weather.cache import Clock, CoordinateCache, utc_now
from temperature_service.weather.client import ForecastProvider, create_forecast_provider
from temperature_service.weather.errors import NotFoundError
from temperature_service.weather.extractor import extract_daily_readings
from temperature_service.weather.geocoding import GeocodingService
from temperature_service.weather.models import (
    Coordinates, LocationCandidate, LocationInput, TemperatureResult
)

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = Coordinates(
    latitude=DEFAULT_LAT,
    longitude=DEFAULT_LON,
    name=DEFAULT_LOCATION_NAME
)


class TemperatureService:
    """Service resolving a location to its daily temperatures near the target hour."""

    def __init__(
        self,
        forecast_provider: Optional[ForecastProvider] = None,
        geocoding_service: Optional[GeocodingService] = None,
        cache: Optional[CoordinateCache] = None,
        clock: Clock = utc_now,
        default_location: Coordinates = DEFAULT_LOCATION,
        target_hour: int = TARGET_HOUR
    ):
        """Initialize the temperature service.

        Args:
            forecast_provider: Forecast client (creates the configured one if None)
            geocoding_service: Geocoding service (creates default if None)
            cache: Result cache (creates one sharing ``clock`` if None)
            clock: Callable returning the current time
            default_location: Location used when none is given
            target_hour: Hour of day to extract readings for
        """
        self.forecast_provider = forecast_provider or create_forecast_provider()
        self.geocoding_service = geocoding_service or GeocodingService()
        # An empty cache is falsy
        self.cache = cache if cache is not None else CoordinateCache(clock=clock)
        self.clock = clock
        self.default_location = default_location
        self.target_hour = target_hour

    async def resolve(
        self,
        location: LocationInput = None,
        force_refresh: bool = False
    ) -> TemperatureResult:
        """Get daily temperatures for a location.

        Args:
            location: Place name, coordinates, or None for the default location
            force_refresh: Skip the cache lookup; the fresh result still replaces the entry

        Returns:
            TemperatureResult with one reading per forecast day

        Raises:
            NotFoundError: If a place name has no geocoding match
            UpstreamError: If the geocoding or forecast API fails
        """
        coords = await self._resolve_location(location)

        if force_refresh:
            logger.info(f"Forced refresh for {coords.latitude}, {coords.longitude}")
        else:
            cached = self.cache.lookup(coords)
            if cached is not None:
                return cached

        samples = await self.forecast_provider.fetch_hourly(coords.latitude, coords.longitude)
        readings = extract_daily_readings(samples, self.target_hour)

        result = TemperatureResult(
            location=coords,
            readings=readings,
            produced_at=self.clock(),
            from_cache=False,
        )
        self.cache.store(coords, result)

        logger.info(f"Resolved {len(readings)} readings for {coords.name or 'coordinates'}")
        return result

    async def search(self, query: str) -> List[LocationCandidate]:
        """Search for locations by name.

        Args:
            query: Free-text place name

        Returns:
            Up to the configured maximum of candidates, empty if none match
        """
        return await self.geocoding_service.search(query)

    async def _resolve_location(self, location: LocationInput) -> Coordinates:
        if isinstance(location, Coordinates):
            return location

        if location is None or not location.strip():
            logger.info(f"Using default location: {self.default_location.name}")
            return self.default_location

        name = location.strip()
        candidates = await self.geocoding_service.search(name, limit=1)
        if not candidates:
            logger.warning(f"Location not found: {name!r}")
            raise NotFoundError(f"Location '{name}' not found")

        match = candidates[0]
        return Coordinates(
            latitude=match.latitude,
            longitude=match.longitude,
            name=match.display_name
        )

    async def aclose(self):
        """Close the forecast and geocoding clients."""
        await self.forecast_provider.aclose()
        await self.geocoding_service.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
