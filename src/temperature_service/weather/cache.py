"""In-memory result cache keyed by rounded coordinates."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from temperature_service.config import CACHE_TTL_SECONDS
from temperature_service.weather.models import Coordinates, TemperatureResult

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

KEY_PRECISION = 4


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def cache_key(latitude: float, longitude: float) -> str:
    """Build the cache key for a coordinate pair.

    Each coordinate is rounded to four decimals, so pairs that differ only
    beyond the fourth decimal share a slot.
    """
    # Adding 0.0 turns -0.0 into 0.0
    lat = round(latitude, KEY_PRECISION) + 0.0
    lon = round(longitude, KEY_PRECISION) + 0.0
    return f"{lat:.{KEY_PRECISION}f},{lon:.{KEY_PRECISION}f}"


@dataclass
class CacheEntry:
    """Stored result with its absolute expiry time."""
    result: TemperatureResult
    expires_at: datetime


class CoordinateCache:
    """TTL cache of temperature results.

    Entries expire a fixed time after insertion regardless of access. Expired
    entries are never returned and are evicted when looked up or swept by
    ``purge_expired``.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(seconds=CACHE_TTL_SECONDS),
        clock: Clock = utc_now
    ):
        """Initialize the cache.

        Args:
            ttl: Lifetime of an entry from insertion
            clock: Callable returning the current time
        """
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def lookup(self, coords: Coordinates) -> Optional[TemperatureResult]:
        """Get a cached result for coordinates.

        Args:
            coords: Coordinates to look up

        Returns:
            Copy of the stored result marked as cached, or None on a miss
        """
        key = cache_key(coords.latitude, coords.longitude)
        now = self.clock()

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug(f"Cache miss for {key}")
                return None
            if now >= entry.expires_at:
                del self._entries[key]
                logger.debug(f"Cache entry for {key} expired at {entry.expires_at.isoformat()}")
                return None
            result = entry.result

        logger.info(f"Cache hit for {key}")
        return result.model_copy(update={"from_cache": True}, deep=True)

    def store(self, coords: Coordinates, result: TemperatureResult) -> None:
        """Store a result for coordinates, replacing any previous entry.

        Args:
            coords: Coordinates the result was computed for
            result: Result to store
        """
        key = cache_key(coords.latitude, coords.longitude)
        entry = CacheEntry(
            result=result.model_copy(update={"from_cache": False}, deep=True),
            expires_at=self.clock() + self.ttl,
        )
        with self._lock:
            self._entries[key] = entry
        logger.debug(f"Cached result for {key} until {entry.expires_at.isoformat()}")

    def purge_expired(self) -> int:
        """Remove all expired entries.

        Returns:
            Number of entries removed
        """
        now = self.clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.info(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
