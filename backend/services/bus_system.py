"""
Wiring of the bus system: registry, estimator, ticks, search and scheduler.
"""

import logging
import random
from typing import List, Optional

from config.simulation import simulation_config
from models import Route
from services.headway_analyzer import HeadwayAnalyzer
from services.osrm_service import OSRMService, close_osrm_service, get_osrm_service
from services.position_advancer import PositionAdvancer
from services.proximity_search import ProximitySearch
from services.route_registry import RouteRegistry
from services.seed_data import build_seed_routes
from services.simulation_scheduler import SimulationScheduler

logger = logging.getLogger(__name__)


class BusSystem:
    """Everything the HTTP boundary needs, built around one registry."""

    def __init__(
        self,
        registry: RouteRegistry,
        estimator: OSRMService,
        rng: Optional[random.Random] = None,
        position_interval: Optional[float] = None,
        headway_interval: Optional[float] = None,
    ):
        self.registry = registry
        self.estimator = estimator
        self.advancer = PositionAdvancer(estimator, rng=rng)
        self.analyzer = HeadwayAnalyzer(estimator)
        self.proximity = ProximitySearch(registry)
        self.scheduler = SimulationScheduler(
            registry,
            self.advancer,
            self.analyzer,
            position_interval=position_interval,
            headway_interval=headway_interval,
        )

    async def seed(self) -> List[Route]:
        """Reset the fleet to the fixture routes."""
        routes = build_seed_routes()
        await self.registry.reset(routes)
        logger.info(f"System seeded with {len(routes)} routes")
        return routes

    async def startup(self, autostart: Optional[bool] = None) -> None:
        loaded = await self.registry.load_from_persistence()
        logger.info(f"Loaded {loaded} routes from persistence")
        if autostart is None:
            autostart = simulation_config.AUTOSTART
        if autostart:
            self.scheduler.start()

    async def shutdown(self) -> None:
        await self.scheduler.stop()


_bus_system: Optional[BusSystem] = None


def get_bus_system() -> BusSystem:
    global _bus_system
    if _bus_system is None:
        from db import database
        from db.repository import RouteRepository

        persistence = None
        if database.SessionLocal is not None:
            persistence = RouteRepository(database.SessionLocal)
        _bus_system = BusSystem(RouteRegistry(persistence), get_osrm_service())
    return _bus_system


async def close_bus_system() -> None:
    global _bus_system
    if _bus_system:
        await _bus_system.shutdown()
        _bus_system = None
    await close_osrm_service()
