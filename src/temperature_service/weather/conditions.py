"""Lookup tables from provider condition codes to human-readable descriptions."""

from typing import Dict, Optional, Union

UNKNOWN_CONDITION = "Unknown"

# WMO weather interpretation codes, as used by Open-Meteo
WMO_DESCRIPTIONS: Dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

# MET Norway symbol codes, without the _day/_night/_polartwilight variant suffix
YR_SYMBOL_DESCRIPTIONS: Dict[str, str] = {
    "clearsky": "Clear sky",
    "fair": "Fair",
    "partlycloudy": "Partly cloudy",
    "cloudy": "Overcast",
    "fog": "Fog",
    "lightrain": "Light rain",
    "rain": "Rain",
    "heavyrain": "Heavy rain",
    "lightrainshowers": "Light rain showers",
    "rainshowers": "Rain showers",
    "heavyrainshowers": "Heavy rain showers",
    "lightrainandthunder": "Light rain and thunder",
    "rainandthunder": "Rain and thunder",
    "heavyrainandthunder": "Heavy rain and thunder",
    "lightrainshowersandthunder": "Light rain and thunder",
    "rainshowersandthunder": "Rain and thunder",
    "heavyrainshowersandthunder": "Heavy rain and thunder",
    "lightsleet": "Light sleet",
    "sleet": "Sleet",
    "heavysleet": "Heavy sleet",
    "lightsleetshowers": "Light sleet showers",
    "sleetshowers": "Sleet showers",
    "heavysleetshowers": "Heavy sleet showers",
    "lightsleetandthunder": "Light sleet and thunder",
    "sleetandthunder": "Sleet and thunder",
    "heavysleetandthunder": "Heavy sleet and thunder",
    "lightsnow": "Light snow",
    "snow": "Snow",
    "heavysnow": "Heavy snow",
    "lightsnowshowers": "Light snow showers",
    "snowshowers": "Snow showers",
    "heavysnowshowers": "Heavy snow showers",
    "lightsnowandthunder": "Light snow and thunder",
    "snowandthunder": "Snow and thunder",
    "heavysnowandthunder": "Snow and thunder",
}

_SYMBOL_VARIANTS = ("_day", "_night", "_polartwilight")


def describe_condition(code: Optional[Union[int, str]]) -> str:
    """Map a provider condition code to a description.

    Integer codes are WMO codes, strings are yr.no symbol codes.
    Anything not in either table maps to ``"Unknown"``.
    """
    if code is None or isinstance(code, bool):
        return UNKNOWN_CONDITION

    if isinstance(code, str):
        symbol = code
        for suffix in _SYMBOL_VARIANTS:
            if symbol.endswith(suffix):
                symbol = symbol[: -len(suffix)]
                break
        return YR_SYMBOL_DESCRIPTIONS.get(symbol, UNKNOWN_CONDITION)

    return WMO_DESCRIPTIONS.get(int(code), UNKNOWN_CONDITION)
