"""Data models for the temperature service."""

from datetime import date as Date, datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class Coordinates(BaseModel):
    """Geographic location, optionally named."""
    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")
    name: Optional[str] = Field(None, description="Display name if known")


class Reading(BaseModel):
    """Temperature observed nearest the target hour on one calendar day."""
    date: Date = Field(..., description="Date in YYYY-MM-DD format")
    time: str = Field(..., pattern=r"^\d{2}:\d{2}$", description="Time in HH:MM format")
    temperature: float = Field(..., description="Temperature rounded to one decimal")
    unit: Literal["Celsius"] = Field("Celsius", description="Temperature unit")
    description: Optional[str] = Field(None, description="Weather condition description")


class TemperatureResult(BaseModel):
    """Daily readings for a location."""
    location: Coordinates = Field(..., description="Resolved location")
    readings: List[Reading] = Field(default_factory=list, description="Readings in chronological order")
    produced_at: datetime = Field(..., description="When the readings were computed")
    from_cache: bool = Field(False, description="Whether the result was served from the cache")

    @field_validator("readings")
    @classmethod
    def _one_reading_per_day(cls, readings: List[Reading]) -> List[Reading]:
        dates = [reading.date for reading in readings]
        if len(set(dates)) != len(dates):
            raise ValueError("readings must not contain two entries for the same date")
        if dates != sorted(dates):
            raise ValueError("readings must be in chronological order")
        return readings


class LocationCandidate(BaseModel):
    """Geocoding match returned by location search."""
    name: str = Field(..., description="Place name")
    country: str = Field("", description="Country name, empty if unknown")
    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")

    @property
    def display_name(self) -> str:
        """Name composed as "City, Country"."""
        return f"{self.name}, {self.country}" if self.country else self.name


class SearchResponse(BaseModel):
    """Location search response model."""
    query: str = Field(..., description="Search query as received")
    results: List[LocationCandidate] = Field(..., description="Matching locations")
    count: int = Field(..., description="Number of results")


class HourlySample(BaseModel):
    """One provider-agnostic hourly forecast sample.

    ``timestamp`` is naive local wall-clock time as encoded by the provider
    adapter; ``condition_code`` is a WMO code (int) or a yr.no symbol (str).
    """
    timestamp: datetime
    temperature: Optional[float] = None
    condition_code: Optional[Union[int, str]] = None


class OpenMeteoHourly(BaseModel):
    """Hourly block of an Open-Meteo forecast response."""
    time: List[str]
    temperature_2m: List[Optional[float]]
    weather_code: List[Optional[int]] = Field(default_factory=list)


class OpenMeteoForecastResponse(BaseModel):
    """Raw response from the Open-Meteo forecast API."""
    latitude: float
    longitude: float
    timezone: str = "GMT"
    hourly: OpenMeteoHourly


class YrForecastResponse(BaseModel):
    """Raw response from yr.no Locationforecast API."""
    type: str = Field(..., description="GeoJSON type")
    geometry: dict = Field(..., description="Location geometry")
    properties: dict = Field(..., description="Forecast properties")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error kind")
    message: str = Field(..., description="Human-readable error message")


LocationInput = Union[str, Coordinates, None]
