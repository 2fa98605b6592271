# geo_utils.py
# Pure mathematical / geographic helper functions.
# No side effects; depends only on models and nav_config.

import math

from .models import Coord, LocationFix
from .nav_config import DISTANCE_DECIMALS


EARTH_RADIUS_KM = 6371.0


def degrees_to_radians(degrees: float) -> float:
    """Convert an angle in degrees (any sign, any magnitude) to radians."""
    return degrees * math.pi / 180


def distance_km(a: Coord, b: Coord) -> float:
    """
    Great-circle (Haversine) distance between two points in kilometres.

    Args:
        a, b: Coordinates in decimal degrees.

    Returns:
        Distance in kilometres, full floating-point precision.
    """
    d_lat = degrees_to_radians(a.lat - b.lat)
    d_lon = degrees_to_radians(a.lon - b.lon)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(degrees_to_radians(b.lat))
        * math.cos(degrees_to_radians(a.lat))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def format_km(km: float) -> str:
    """Display form of a distance: always two decimals, e.g. '200.45'."""
    return f"{km:.{DISTANCE_DECIMALS}f}"


def convert_to_km(pickup: Coord, drop_off: Coord) -> str:
    """Distance between two points as a two-decimal kilometre string."""
    return format_km(distance_km(pickup, drop_off))


def rounded_distance_km(a: Coord, b: Coord) -> float:
    """
    Distance rounded to two decimals.

    Threshold comparisons during tracking use this value, not the full
    precision one, so two vertices within 5 m of each other compare equal.
    """
    return float(convert_to_km(a, b))


def distance_from_fix_km(fix: LocationFix, end_point: Coord) -> float:
    """
    Rounded distance from a location-provider reading to end_point.

    A fix without latitude/longitude is measured from (0, 0); callers should
    check fix.has_position when that matters.
    """
    return rounded_distance_km(fix.to_coord(), end_point)


def normalize_heading(heading: int) -> int:
    """
    Shift a negative compass heading into the positive range.

    Only a single +360 correction is applied: -90 → 270, -360 → 0,
    but -450 → -90.
    """
    if heading < 0:
        return heading + 360
    return heading
