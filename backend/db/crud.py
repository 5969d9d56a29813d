"""
CRUD operations for the bus system database.

Provides functions to:
- Load routes with their stops and buses
- Save one route's mutated stops/buses
- Replace the whole fleet (seed/reset)
- Prefilter routes by stop proximity (bounding box)
"""

import logging
from typing import List

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session, selectinload

from geo import bounding_boxes
from models import Bus, BusStatus, GeoPoint, Route, Stop
from . import models

logger = logging.getLogger(__name__)


# =============================================================================
# Mapping
# =============================================================================

def _stop_rows(route: Route) -> List[models.BusStopModel]:
    return [
        models.BusStopModel(
            stop_id=stop.id,
            position=idx,
            name=stop.name,
            lon=stop.location.lon,
            lat=stop.location.lat,
        )
        for idx, stop in enumerate(route.stops)
    ]


def _bus_rows(route: Route) -> List[models.BusModel]:
    return [
        models.BusModel(
            position=idx,
            bus_number=bus.bus_number,
            lon=bus.current_location.lon,
            lat=bus.current_location.lat,
            next_stop_index=bus.next_stop_index,
            passenger_count=bus.passenger_count,
            status=bus.status.value,
            recommendation=bus.recommendation,
            last_updated=bus.last_updated,
        )
        for idx, bus in enumerate(route.buses)
    ]


def to_domain(db_route: models.BusRouteModel) -> Route:
    """Convert a route row (with loaded children) to the domain model."""
    return Route(
        route_name=db_route.route_name,
        ideal_headway_minutes=db_route.ideal_headway_minutes,
        stops=[
            Stop(id=s.stop_id, name=s.name, location=GeoPoint(lon=s.lon, lat=s.lat))
            for s in db_route.stops
        ],
        buses=[
            Bus(
                bus_number=b.bus_number,
                current_location=GeoPoint(lon=b.lon, lat=b.lat),
                next_stop_index=b.next_stop_index or 0,
                passenger_count=b.passenger_count or 0,
                status=BusStatus(b.status or BusStatus.ON_TIME.value),
                recommendation=b.recommendation,
                last_updated=b.last_updated,
            )
            for b in db_route.buses
        ],
    )


# =============================================================================
# Route CRUD
# =============================================================================

def load_routes(db: Session) -> List[Route]:
    """Load every route with its stops and buses."""
    stmt = (
        select(models.BusRouteModel)
        .options(selectinload(models.BusRouteModel.stops), selectinload(models.BusRouteModel.buses))
        .order_by(models.BusRouteModel.route_name)
    )
    return [to_domain(r) for r in db.scalars(stmt).all()]


def save_route(db: Session, route: Route) -> models.BusRouteModel:
    """
    Persist one route, replacing its stops and buses.

    Args:
        db: Database session
        route: Route in its current (mutated) state

    Returns:
        Saved BusRouteModel instance
    """
    db_route = db.get(models.BusRouteModel, route.route_name)
    if db_route is None:
        db_route = models.BusRouteModel(route_name=route.route_name)
        db.add(db_route)

    db_route.ideal_headway_minutes = route.ideal_headway_minutes
    db_route.stops = _stop_rows(route)
    db_route.buses = _bus_rows(route)

    db.commit()
    logger.debug(f"Saved route {route.route_name} with {len(route.buses)} buses")
    return db_route


def delete_all_routes(db: Session) -> int:
    """Delete every route (children cascade). Returns the number deleted."""
    db_routes = db.scalars(select(models.BusRouteModel)).all()
    for db_route in db_routes:
        db.delete(db_route)
    db.commit()
    return len(db_routes)


def replace_all_routes(db: Session, routes: List[Route]) -> None:
    """Reset the fleet: drop all routes and store ``routes`` instead."""
    deleted = delete_all_routes(db)
    for route in routes:
        db_route = models.BusRouteModel(
            route_name=route.route_name,
            ideal_headway_minutes=route.ideal_headway_minutes,
        )
        db_route.stops = _stop_rows(route)
        db_route.buses = _bus_rows(route)
        db.add(db_route)
    db.commit()
    logger.info(f"Replaced {deleted} routes with {len(routes)} seeded routes")


def find_route_names_near(db: Session, point: GeoPoint, radius_m: float) -> List[str]:
    """
    Names of routes having at least one stop inside the bounding box of
    ``radius_m`` around ``point``. Coarse prefilter only: callers still
    compute exact distances.
    """
    stop = models.BusStopModel
    in_any_box = or_(*(
        and_(
            stop.lat >= min_lat,
            stop.lat <= max_lat,
            stop.lon >= min_lon,
            stop.lon <= max_lon,
        )
        for min_lon, min_lat, max_lon, max_lat in bounding_boxes(point, radius_m)
    ))
    stmt = select(stop.route_name).where(in_any_box).distinct()
    return list(db.scalars(stmt).all())
