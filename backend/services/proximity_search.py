"""
Nearby-stop search across all routes.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from config.simulation import simulation_config
from geo import haversine_m
from models import GeoPoint, NearbyStop
from services.route_registry import RouteRegistry

logger = logging.getLogger(__name__)


class InvalidCoordinatesError(ValueError):
    """Raised for missing or out-of-range search input."""


def parse_point(lat: Any, lon: Any) -> GeoPoint:
    """Build a search point from raw latitude/longitude input."""
    if lat is None or lon is None or lat == "" or lon == "":
        raise InvalidCoordinatesError("Latitude and longitude are required.")
    try:
        latitude = float(lat)
        longitude = float(lon)
    except (TypeError, ValueError):
        raise InvalidCoordinatesError("Latitude and longitude must be numbers.") from None
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidCoordinatesError("Latitude and longitude must be finite numbers.")
    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise InvalidCoordinatesError("Latitude must be within [-90, 90] and longitude within [-180, 180].")
    return GeoPoint(lon=longitude, lat=latitude)


class ProximitySearch:
    """Finds stops within a radius of a point, nearest first."""

    def __init__(self, registry: RouteRegistry, walking_speed_mps: Optional[float] = None):
        self._registry = registry
        self.walking_speed_mps = walking_speed_mps or simulation_config.WALKING_SPEED_MPS

    async def find_nearby_stops(
        self,
        point: GeoPoint,
        max_distance_km: Optional[float] = None,
    ) -> List[NearbyStop]:
        if max_distance_km is None:
            max_distance_km = simulation_config.DEFAULT_SEARCH_RADIUS_KM
        if not math.isfinite(max_distance_km) or max_distance_km < 0:
            raise InvalidCoordinatesError("max_distance_km must be a non-negative number.")
        max_distance_m = max_distance_km * 1000

        candidates = await self._registry.candidate_routes_near(point, max_distance_m)
        if not candidates:
            return []

        found: Dict[str, tuple] = {}
        for route in candidates:
            for stop in route.stops:
                if stop.id in found:
                    continue
                distance = haversine_m(point, stop.location)
                if distance <= max_distance_m:
                    found[stop.id] = (distance, route.route_name, stop)

        ranked = sorted(found.values(), key=lambda item: item[0])
        logger.debug(f"[Proximity] {len(ranked)} stops within {max_distance_km}km of {point.as_tuple()}")
        return [
            NearbyStop(
                stop_id=stop.id,
                name=stop.name,
                route_name=route_name,
                location=stop.location,
                distance_meters=round(distance),
                walking_time_minutes=round(distance / self.walking_speed_mps / 60),
            )
            for distance, route_name, stop in ranked
        ]
