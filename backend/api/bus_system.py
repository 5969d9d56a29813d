"""
Bus System API.

Read access to the live fleet, nearby-stop search, the seed/reset
operation, simulation status and routing-service health.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from config import osrm_config, simulation_config
from models import BusSystemDataResponse, MessageResponse, NearbyStopsResponse
from services.bus_system import BusSystem, get_bus_system
from services.proximity_search import InvalidCoordinatesError, parse_point

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bus-system", tags=["bus-system"])


def _error(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    body = MessageResponse(success=False, message=message, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.get("/data", response_model=BusSystemDataResponse)
async def get_bus_system_data(system: BusSystem = Depends(get_bus_system)):
    try:
        return BusSystemDataResponse(data=system.registry.snapshot())
    except Exception:
        logger.exception("Error reading bus system data")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server Error")


@router.get("/nearby-stops", response_model=NearbyStopsResponse)
async def get_nearby_stops(
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    max_distance_km: Optional[float] = None,
    system: BusSystem = Depends(get_bus_system),
):
    try:
        point = parse_point(lat, lon)
        stops = await system.proximity.find_nearby_stops(point, max_distance_km)
    except InvalidCoordinatesError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))
    except Exception:
        logger.exception("Error fetching nearby stops")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server Error")
    return NearbyStopsResponse(data=stops)


@router.post(
    "/seed",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def seed_system(system: BusSystem = Depends(get_bus_system)):
    try:
        await system.seed()
    except Exception as exc:
        logger.exception("Seeding failed")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Seeding failed", str(exc))
    return MessageResponse(success=True, message="System seeded successfully")


@router.get("/simulation")
async def get_simulation_status(system: BusSystem = Depends(get_bus_system)) -> dict:
    data = system.scheduler.status()
    data["config"] = simulation_config.get_config_dict()
    return {"success": True, "data": data}


@router.get("/routing/health")
async def get_routing_health(system: BusSystem = Depends(get_bus_system)) -> dict:
    health = await system.estimator.health_check()
    health["stats"] = system.estimator.get_stats()
    health["config"] = osrm_config.get_config_dict()
    return {"success": True, "data": health}
