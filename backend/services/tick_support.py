"""
Shared pieces of the simulation ticks: the per-tick report and the
bounded travel-time call.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from config.osrm import osrm_config
from config.simulation import simulation_config
from models import GeoPoint

logger = logging.getLogger(__name__)


class TravelTimeEstimator(Protocol):
    async def estimate_duration(self, start: GeoPoint, end: GeoPoint) -> float:
        ...


@dataclass
class TickReport:
    """Outcome of one tick over all routes."""
    kind: str
    routes_processed: int = 0
    routes_skipped: int = 0
    buses_updated: int = 0
    persistence_failures: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "kind": self.kind,
            "routes_processed": self.routes_processed,
            "routes_skipped": self.routes_skipped,
            "buses_updated": self.buses_updated,
            "persistence_failures": list(self.persistence_failures),
        }


async def bounded_estimate(
    estimator: TravelTimeEstimator,
    start: GeoPoint,
    end: GeoPoint,
    timeout: Optional[float] = None,
) -> float:
    """
    Travel time in seconds, never waiting longer than ``timeout``.

    A timed-out call degrades to the fallback duration like any other
    routing failure.
    """
    timeout = simulation_config.ESTIMATE_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        return await asyncio.wait_for(estimator.estimate_duration(start, end), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"[OSRM] Estimate exceeded {timeout}s, using default duration")
        return osrm_config.FALLBACK_DURATION_SECONDS


async def sync_route(registry, route, report: TickReport) -> None:
    """Persist a processed route; failures are logged and counted, never raised."""
    try:
        await registry.sync_route(route)
    except Exception as e:
        logger.error(f"[Sim] Failed to persist route {route.route_name}: {e}")
        report.persistence_failures.append(route.route_name)
