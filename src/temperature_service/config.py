"""Configuration settings for the temperature service."""

import os
from typing import Final
from dotenv import load_dotenv

load_dotenv()

# Forecast providers
FORECAST_PROVIDER: str = os.getenv("FORECAST_PROVIDER", "open-meteo").lower()  # open-meteo | yr
OPEN_METEO_URL: Final[str] = os.getenv("OPEN_METEO_URL", "https://api.open-meteo.com/v1/forecast")
FORECAST_DAYS: int = int(os.getenv("FORECAST_DAYS", "16"))
YR_API_BASE_URL: Final[str] = os.getenv(
    "YR_API_BASE_URL", "https://api.met.no/weatherapi/locationforecast/2.0/compact"
)
USER_AGENT: Final[str] = os.getenv("USER_AGENT", "WeatherTemperatureService/2.0 (user@example.com)")
HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

# Geocoding
GEOCODING_USER_AGENT: Final[str] = os.getenv("GEOCODING_USER_AGENT", "weather-temperature-service")
SEARCH_MAX_RESULTS: int = int(os.getenv("SEARCH_MAX_RESULTS", "5"))
SEARCH_MIN_QUERY_LENGTH: int = 2

# Default location (Belgrade)
DEFAULT_LAT: Final[float] = 44.8176
DEFAULT_LON: Final[float] = 20.4599
DEFAULT_LOCATION_NAME: Final[str] = "Belgrade"

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "3000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

# Target time settings
TARGET_HOUR: int = int(os.getenv("TARGET_HOUR", "14"))

# In-memory result cache
CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", "3600"))  # 1 hour

# Rate limiting configuration
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900"))  # 15 minutes
RATE_LIMIT_API_REQUESTS: int = int(os.getenv("RATE_LIMIT_API_REQUESTS", "100"))
RATE_LIMIT_SEARCH_REQUESTS: int = int(os.getenv("RATE_LIMIT_SEARCH_REQUESTS", "30"))
RATE_LIMIT_REDIS_KEY_PREFIX: str = os.getenv("RATE_LIMIT_REDIS_KEY_PREFIX", "rate_limit")
