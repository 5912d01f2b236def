"""Geocoding service for location search and name resolution."""

import logging
from typing import Any, List, Optional

from fastapi.concurrency import run_in_threadpool
from geopy.exc import GeocoderServiceError
from geopy.geocoders import Nominatim

from temperature_service.config import (
    GEOCODING_USER_AGENT, HTTP_TIMEOUT_SECONDS, SEARCH_MAX_RESULTS
)
from temperature_service.weather.errors import UpstreamError
from temperature_service.weather.models import LocationCandidate

logger = logging.getLogger(__name__)

# Address components tried in order for a candidate's place name
_PLACE_KEYS = ("city", "town", "village", "municipality", "county")


class GeocodingService:
    """Forward geocoding through Nominatim.

    geopy is synchronous, so lookups run in the threadpool and the event
    loop stays free for other requests.
    """

    def __init__(self, geolocator: Optional[Any] = None, max_results: int = SEARCH_MAX_RESULTS):
        """Initialize the geocoding service.

        Args:
            geolocator: geopy geocoder instance (creates Nominatim if None)
            max_results: Upper bound on candidates returned by ``search``
        """
        self.geolocator = geolocator or Nominatim(
            user_agent=GEOCODING_USER_AGENT,
            timeout=HTTP_TIMEOUT_SECONDS
        )
        self.max_results = max_results
        logger.info("GeocodingService initialized with Nominatim")

    async def search(self, query: str, limit: Optional[int] = None) -> List[LocationCandidate]:
        """Find locations matching a free-text query.

        Args:
            query: Place name to search for
            limit: Maximum number of candidates (capped at ``max_results``)

        Returns:
            Candidates in provider order, empty if nothing matched

        Raises:
            UpstreamError: If the geocoding provider is unavailable or fails
        """
        limit = min(limit or self.max_results, self.max_results)
        logger.info(f"Geocoding query: {query!r} (limit={limit})")

        try:
            locations = await run_in_threadpool(
                self.geolocator.geocode,
                query,
                exactly_one=False,
                limit=limit,
                addressdetails=True,
                language="en",
            )
        except GeocoderServiceError as e:
            logger.error(f"Geocoding service unavailable for {query!r}: {e}")
            raise UpstreamError("Geocoding service temporarily unavailable") from e

        if not locations:
            logger.info(f"No locations found for {query!r}")
            return []

        candidates = [self._to_candidate(location) for location in locations[:limit]]
        logger.info(f"Found {len(candidates)} locations for {query!r}")
        return candidates

    @staticmethod
    def _to_candidate(location: Any) -> LocationCandidate:
        raw = location.raw or {}
        address = raw.get("address") or {}

        name = next((address[key] for key in _PLACE_KEYS if address.get(key)), None)
        if not name:
            name = raw.get("name") or location.address.split(",")[0].strip()

        return LocationCandidate(
            name=name,
            country=address.get("country", ""),
            latitude=location.latitude,
            longitude=location.longitude,
        )

    async def aclose(self):
        """Release resources; geopy's default adapter needs no cleanup."""
        return None
