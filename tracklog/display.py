"""Human-readable distance and duration strings.

The recorder keeps meters and seconds; everything here is presentation
and depends on the viewer's country, never on the track.
"""

from typing import Optional

from .config import CONFIG

METRIC = "metric"
IMPERIAL = "imperial"

FEET_PER_METER = 3.28084
METERS_PER_MILE = 1609.344


def unit_system(country_code: Optional[str]) -> str:
    """Unit system used in a country (ISO 3166 alpha-2 code)"""
    if country_code and country_code.upper() in CONFIG["imperial_countries"]:
        return IMPERIAL
    return METRIC


def format_distance(meters: float, system: str = METRIC) -> str:
    """Format a distance, switching to km/mi for long tracks"""
    long_distance = meters >= CONFIG["long_distance_threshold"]
    if system == IMPERIAL:
        if long_distance:
            return f"{meters / METERS_PER_MILE:.2f}mi"
        return f"{meters * FEET_PER_METER:.0f}ft"
    if long_distance:
        return f"{meters / 1000:.2f}km"
    return f"{meters:.0f}m"


def format_duration(seconds: float) -> str:
    """Format seconds as H:MM:SS"""
    s = int(round(max(0.0, seconds)))
    h = s // 3600
    m = (s % 3600) // 60
    sec = s % 60
    return f"{h}:{m:02d}:{sec:02d}"
