"""
Position advancement for the simulated fleet.

Each tick moves every bus toward its next stop by the fraction of the
remaining leg it would cover in one tick interval (constant-velocity
interpolation, re-evaluated every tick), or registers a stop arrival.
"""

import logging
import math
import random
from datetime import datetime
from typing import Callable, Optional

from config.simulation import simulation_config
from models import Bus, GeoPoint, Route
from services.route_registry import RouteRegistry
from services.tick_support import TickReport, TravelTimeEstimator, bounded_estimate, sync_route

logger = logging.getLogger(__name__)


def coordinate_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Euclidean distance in coordinate units (degrees), not meters."""
    return math.hypot(a.lon - b.lon, a.lat - b.lat)


class PositionAdvancer:
    """Advances bus positions one tick at a time."""

    def __init__(
        self,
        estimator: TravelTimeEstimator,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
        tick_interval_seconds: Optional[float] = None,
        arrival_threshold: Optional[float] = None,
    ):
        self._estimator = estimator
        self._rng = rng or random.Random(simulation_config.RANDOM_SEED)
        self._clock = clock
        self.tick_interval_seconds = tick_interval_seconds or simulation_config.POSITION_TICK_SECONDS
        self.arrival_threshold = arrival_threshold or simulation_config.ARRIVAL_THRESHOLD

    async def advance_tick(self, registry: RouteRegistry) -> TickReport:
        report = TickReport(kind="position")
        for route in registry.routes():
            if not route.stops or not route.buses:
                logger.debug(f"[Sim] Skipping route {route.route_name}: no stops or buses")
                report.routes_skipped += 1
                continue
            async with registry.lock_for(route.route_name):
                report.buses_updated += await self.advance_route(route)
                await sync_route(registry, route, report)
            report.routes_processed += 1
        return report

    async def advance_route(self, route: Route) -> int:
        for bus in route.buses:
            await self.advance_bus(route, bus)
        return len(route.buses)

    async def advance_bus(self, route: Route, bus: Bus) -> None:
        target = route.stop_for(bus).location
        distance = coordinate_distance(bus.current_location, target)

        if distance < self.arrival_threshold:
            self._arrive(route, bus)
        else:
            duration = await bounded_estimate(self._estimator, bus.current_location, target)
            if duration > 0:
                fraction = min(1.0, self.tick_interval_seconds / duration)
                current = bus.current_location
                bus.current_location = GeoPoint(
                    lon=current.lon + (target.lon - current.lon) * fraction,
                    lat=current.lat + (target.lat - current.lat) * fraction,
                )

        bus.last_updated = self._clock()

    def _arrive(self, route: Route, bus: Bus) -> None:
        bus.next_stop_index = (bus.next_stop_index + 1) % len(route.stops)
        delta = self._rng.randint(
            simulation_config.PASSENGER_DELTA_MIN, simulation_config.PASSENGER_DELTA_MAX
        )
        bus.passenger_count = max(0, bus.passenger_count + delta)
        if bus.recommendation:
            logger.info(f"[Sim] Bus {bus.bus_number} has acted on recommendation.")
            bus.recommendation = None
