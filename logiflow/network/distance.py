"""Great-circle distance helpers."""

import math

from ..constants import EARTH_RADIUS_KM
from ..models.geo import GeoPoint


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Calculate distance between two points in kilometers using the Haversine formula."""
    lat1, lon1, lat2, lon2 = map(math.radians, [a.lat, a.lng, b.lat, b.lng])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))
