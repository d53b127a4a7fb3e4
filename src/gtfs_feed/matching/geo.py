"""Ground distance between stops and shape points.

The stop-to-shape matcher compares every candidate shape point against a
search radius in meters, so coordinates from ``stops.txt`` and
``shapes.txt`` are turned into meters on a spherical earth.
"""

import math

# mean earth radius (IUGG), meters
EARTH_RADIUS_METERS = 6_371_000


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Meters between two WGS84 positions given in degrees.

    Accurate to well under a meter at the few-meter radii used for matching.
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    half_dphi = math.radians(lat2 - lat1) / 2
    half_dlambda = math.radians(lon2 - lon1) / 2

    h = math.sin(half_dphi) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(half_dlambda) ** 2
    # clamp rounding noise for antipodal points
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(min(1.0, h)))
