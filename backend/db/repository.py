"""
Route persistence backed by a SQLAlchemy session factory.

Each method opens its own session; calls are blocking and are run from
the simulation via ``asyncio.to_thread``.
"""

import logging
from typing import List

from models import GeoPoint, Route
from . import crud

logger = logging.getLogger(__name__)


class RouteRepository:
    """Load/save routes and answer stop-proximity prefilter queries."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def load_routes(self) -> List[Route]:
        with self._session_factory() as db:
            return crud.load_routes(db)

    def save_route(self, route: Route) -> None:
        with self._session_factory() as db:
            try:
                crud.save_route(db, route)
            except Exception:
                db.rollback()
                raise

    def replace_all(self, routes: List[Route]) -> None:
        with self._session_factory() as db:
            try:
                crud.replace_all_routes(db, routes)
            except Exception:
                db.rollback()
                raise

    def find_route_names_near(self, point: GeoPoint, radius_m: float) -> List[str]:
        with self._session_factory() as db:
            return crud.find_route_names_near(db, point, radius_m)
