"""
In-memory route registry.

Single source of truth for the live fleet while the process runs. Routes are
keyed by ``route_name`` and mutated in place by the simulation ticks; each
route has its own asyncio lock so a tick's read-modify-write of a route is
never interleaved with another tick on the same route. Persistence is an
explicit sync step (``sync_route``), never implicit.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack
from typing import Dict, List

from geo import bounding_boxes, in_box
from models import GeoPoint, Route

logger = logging.getLogger(__name__)


class RouteRegistry:
    """Route store keyed by route name, with optional persistence."""

    def __init__(self, persistence=None) -> None:
        self._routes: Dict[str, Route] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._persistence = persistence

    @staticmethod
    def _check_unique(routes: List[Route]) -> List[str]:
        names = [r.route_name for r in routes]
        if len(names) != len(set(names)):
            raise ValueError("Route names must be unique")
        return names

    def _set_routes(self, routes: List[Route]) -> None:
        names = self._check_unique(routes)
        self._routes = {r.route_name: r for r in routes}
        self._locks = {name: self._locks.get(name) or asyncio.Lock() for name in names}

    def load(self, routes: List[Route]) -> None:
        """Replace the in-memory routes without touching persistence."""
        self._set_routes(routes)
        logger.info(f"[Registry] Loaded {len(routes)} routes")

    async def load_from_persistence(self) -> int:
        if self._persistence is None:
            return 0
        routes = await asyncio.to_thread(self._persistence.load_routes)
        self.load(routes)
        return len(routes)

    async def reset(self, routes: List[Route]) -> None:
        """
        Replace the whole fleet, in memory and in persistence.

        Every route lock, old and new names in name order, is held across
        the persistence reset and the in-memory swap.
        """
        names = sorted(set(self._routes) | set(self._check_unique(routes)))
        async with AsyncExitStack() as stack:
            for name in names:
                await stack.enter_async_context(self.lock_for(name))
            if self._persistence is not None:
                await asyncio.to_thread(
                    self._persistence.replace_all, [r.model_copy(deep=True) for r in routes]
                )
            self._set_routes(routes)
        logger.info(f"[Registry] Reset fleet with {len(routes)} routes")

    def route_names(self) -> List[str]:
        return list(self._routes)

    def routes(self) -> List[Route]:
        """Live route objects (mutating them mutates the registry)."""
        return list(self._routes.values())

    def get(self, route_name: str) -> Route:
        try:
            return self._routes[route_name]
        except KeyError:
            raise KeyError(f"Route not found: {route_name}") from None

    def snapshot(self) -> List[Route]:
        """Deep copies of every route, safe to serialize outside the locks."""
        return [r.model_copy(deep=True) for r in self._routes.values()]

    def lock_for(self, route_name: str) -> asyncio.Lock:
        lock = self._locks.get(route_name)
        if lock is None:
            lock = self._locks[route_name] = asyncio.Lock()
        return lock

    def is_current(self, route: Route) -> bool:
        """False once a reset has replaced ``route`` with another object."""
        return self._routes.get(route.route_name) is route

    async def sync_route(self, route: Route) -> bool:
        """
        Persist one route's current state.

        Returns False when nothing was written (no persistence attached, or
        the route was replaced by a reset while the tick was running).
        Persistence errors propagate to the caller.
        """
        if self._persistence is None:
            return False
        if not self.is_current(route):
            logger.debug(f"[Registry] Route {route.route_name} was reset, skipping sync")
            return False
        await asyncio.to_thread(self._persistence.save_route, route.model_copy(deep=True))
        return True

    async def candidate_routes_near(self, point: GeoPoint, radius_m: float) -> List[Route]:
        """
        Coarse prefilter: routes with at least one stop inside the bounding
        box of ``radius_m`` around ``point``.
        """
        if self._persistence is not None:
            names = await asyncio.to_thread(self._persistence.find_route_names_near, point, radius_m)
            return [self._routes[name] for name in names if name in self._routes]
        return [r for r in self._routes.values() if _any_stop_in_box(r, point, radius_m)]


def _any_stop_in_box(route: Route, point: GeoPoint, radius_m: float) -> bool:
    boxes = bounding_boxes(point, radius_m)
    return any(in_box(stop.location, box) for stop in route.stops for box in boxes)
