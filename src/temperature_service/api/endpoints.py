"""API endpoints for the temperature service."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from temperature_service.config import (
    DEFAULT_LAT, DEFAULT_LON, DEFAULT_LOCATION_NAME,
    RATE_LIMIT_API_REQUESTS, RATE_LIMIT_SEARCH_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS, SEARCH_MIN_QUERY_LENGTH, TARGET_HOUR
)
from temperature_service.weather.errors import InvalidInputError
from temperature_service.weather.models import (
    Coordinates, ErrorResponse, LocationInput, SearchResponse, TemperatureResult
)
from temperature_service.weather.service import TemperatureService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["temperature"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


def get_temperature_service(request: Request) -> TemperatureService:
    """Dependency returning the application's shared service instance."""
    return request.app.state.temperature_service


@router.get("/temperature", response_model=TemperatureResult, responses=ERROR_RESPONSES)
async def get_temperature(
    location: Optional[str] = Query(
        None,
        description="Location name, e.g. 'Paris' (takes precedence over lat/lon)"
    ),
    lat: Optional[float] = Query(
        None,
        ge=-90,
        le=90,
        description="Latitude in decimal degrees (use with lon)"
    ),
    lon: Optional[float] = Query(
        None,
        ge=-180,
        le=180,
        description="Longitude in decimal degrees (use with lat)"
    ),
    refresh: bool = Query(False, description="Bypass the cache and fetch fresh data"),
    service: TemperatureService = Depends(get_temperature_service)
) -> TemperatureResult:
    """Get daily temperatures around the target hour for a location.

    Args:
        location: Location name
        lat: Latitude in decimal degrees (must provide with lon)
        lon: Longitude in decimal degrees (must provide with lat)
        refresh: Force a cache refresh

    Returns:
        TemperatureResult with one reading per forecast day
    """
    location_input = validate_location_parameters(location, lat, lon)
    result = await service.resolve(location_input, force_refresh=refresh)
    logger.info(f"Returning {len(result.readings)} readings (cached={result.from_cache})")
    return result


@router.get("/belgrade/temperature", response_model=TemperatureResult, responses=ERROR_RESPONSES)
async def get_default_temperature(
    service: TemperatureService = Depends(get_temperature_service)
) -> TemperatureResult:
    """Legacy route returning temperatures for the default location."""
    return await service.resolve()


@router.get("/search", response_model=SearchResponse, responses=ERROR_RESPONSES)
async def search_locations(
    q: Optional[str] = Query(None, description=f"Search query (min {SEARCH_MIN_QUERY_LENGTH} characters)"),
    service: TemperatureService = Depends(get_temperature_service)
) -> SearchResponse:
    """Search for locations by name.

    Raises:
        InvalidInputError: If the query is missing or too short
    """
    query = (q or "").strip()
    if len(query) < SEARCH_MIN_QUERY_LENGTH:
        raise InvalidInputError(f"Query must be at least {SEARCH_MIN_QUERY_LENGTH} characters")

    results = await service.search(query)
    return SearchResponse(query=query, results=results, count=len(results))


def validate_location_parameters(
    location: Optional[str],
    lat: Optional[float],
    lon: Optional[float]
) -> LocationInput:
    """
    Turn request parameters into a service location input.

    Args:
        location: Location name
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees

    Returns:
        Location name, Coordinates, or None for the default location

    Raises:
        InvalidInputError: If only one of lat/lon is provided
    """
    if location and location.strip():
        return location.strip()

    if lat is None and lon is None:
        return None

    if lat is None or lon is None:
        raise InvalidInputError("Both latitude and longitude must be provided when using coordinates.")

    return Coordinates(latitude=lat, longitude=lon)


@router.get("/docs")
async def get_api_docs() -> dict:
    """Describe the API.

    Returns:
        Endpoints, parameters, examples and rate limits
    """
    window_minutes = RATE_LIMIT_WINDOW_SECONDS // 60
    return {
        "name": "Weather Temperature Service",
        "version": "2.0.0",
        "endpoints": {
            "GET /": "Web UI interface",
            "GET /health": "Health check",
            "GET /api/temperature": f"Get temperature for location (default: {DEFAULT_LOCATION_NAME})",
            "GET /api/belgrade/temperature": f"Get {DEFAULT_LOCATION_NAME} temperature (legacy)",
            "GET /api/search": "Search for locations by name",
            "GET /api/docs": "API documentation",
        },
        "parameters": {
            "temperature": {
                "location": "Location name (string)",
                "lat": "Latitude (number)",
                "lon": "Longitude (number)",
                "refresh": "Force cache refresh (boolean)",
            },
            "search": {
                "q": f"Search query (string, min {SEARCH_MIN_QUERY_LENGTH} chars)",
            },
        },
        "default_location": {
            "name": DEFAULT_LOCATION_NAME,
            "latitude": DEFAULT_LAT,
            "longitude": DEFAULT_LON,
        },
        "target_hour": f"{TARGET_HOUR:02d}:00",
        "examples": {
            "defaultTemperature": "/api/temperature",
            "parisTemperature": "/api/temperature?location=Paris",
            "customCoords": "/api/temperature?lat=48.8566&lon=2.3522",
            "searchCities": "/api/search?q=New",
        },
        "rateLimit": {
            "general": f"{RATE_LIMIT_API_REQUESTS} requests per {window_minutes} minutes",
            "search": f"{RATE_LIMIT_SEARCH_REQUESTS} requests per {window_minutes} minutes",
        },
    }
