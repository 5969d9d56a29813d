"""
Geographic helpers shared by the proximity search and its prefilters.
"""

import math
from typing import List, Tuple

from models import GeoPoint

EARTH_RADIUS_M = 6_371_000.0
METERS_PER_DEGREE = EARTH_RADIUS_M * math.pi / 180.0

# Bounding boxes are padded so they always contain the search circle.
BOX_PADDING = 1.05


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlmb = math.radians(b.lon - a.lon)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


Box = Tuple[float, float, float, float]


def bounding_boxes(point: GeoPoint, radius_m: float) -> List[Box]:
    """
    (min_lon, min_lat, max_lon, max_lat) boxes covering the circle of
    ``radius_m`` around ``point``. A box crossing the antimeridian is split
    in two.
    """
    dlat = radius_m * BOX_PADDING / METERS_PER_DEGREE
    min_lat, max_lat = point.lat - dlat, point.lat + dlat
    cos_lat = math.cos(math.radians(point.lat))
    if cos_lat < 1e-6 or dlat / cos_lat >= 180.0:
        return [(-180.0, min_lat, 180.0, max_lat)]

    dlon = dlat / cos_lat
    min_lon, max_lon = point.lon - dlon, point.lon + dlon
    if min_lon < -180.0:
        return [(min_lon + 360.0, min_lat, 180.0, max_lat), (-180.0, min_lat, max_lon, max_lat)]
    if max_lon > 180.0:
        return [(min_lon, min_lat, 180.0, max_lat), (-180.0, min_lat, max_lon - 360.0, max_lat)]
    return [(min_lon, min_lat, max_lon, max_lat)]


def in_box(point: GeoPoint, box: Box) -> bool:
    min_lon, min_lat, max_lon, max_lat = box
    return min_lon <= point.lon <= max_lon and min_lat <= point.lat <= max_lat
