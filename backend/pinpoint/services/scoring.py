import math
from bisect import bisect_right
from math import radians, sin, cos, sqrt, atan2
from typing import Tuple

from ..models.game import Coordinate, DistanceBand

EARTH_RADIUS_KM = 6371.0

# (upper bound in km, label, tier); each band covers [previous bound, bound)
DISTANCE_BANDS: Tuple[Tuple[float, str, str], ...] = (
    (50, "Pinpoint Accuracy", "excellent"),
    (200, "Very Close", "excellent"),
    (500, "Close", "good"),
    (1000, "Same Region", "good"),
    (2000, "Same Continent", "fair"),
    (5000, "Far", "far"),
    (math.inf, "Very Far", "far"),
)

TIER_ORDER = ("excellent", "good", "fair", "far")

_BOUNDS = [bound for bound, _, _ in DISTANCE_BANDS[:-1]]


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth.

    Args:
        lat1, lon1: Coordinates of the first point (degrees)
        lat2, lon2: Coordinates of the second point (degrees)

    Returns:
        Distance in kilometers
    """
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)

    a = sin(dlat / 2)**2 + cos(lat1_rad) * cos(lat2_rad) * sin(dlon / 2)**2
    a = min(a, 1.0)  # rounding can push antipodal points just past 1
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


def get_distance_band(distance: float) -> DistanceBand:
    """
    Classify a guess distance.

    Bands are closed below and open above, so every non-negative distance
    (including infinity) falls in exactly one of them.
    """
    if math.isnan(distance) or distance < 0:
        raise ValueError(f"distance must be a non-negative number, got {distance}")
    _, label, tier = DISTANCE_BANDS[bisect_right(_BOUNDS, distance)]
    return DistanceBand(label=label, tier=tier)
