"""
Great-circle distance between two coordinate pairs.
"""
import math

EARTH_RADIUS_MILES = 3959


def distance_miles(point_a, point_b) -> float:
    """
    Haversine distance in miles.

    Both points are ``(lat, lng)`` pairs in degrees. Callers make sure both
    are present; NaN input yields NaN.
    """
    lat1, lng1 = point_a
    lat2, lng2 = point_b

    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push a a hair past 1 for antipodal points
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))
    return EARTH_RADIUS_MILES * c
