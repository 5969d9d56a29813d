"""
Pydantic models for the bus system: routes, stops, buses and search results.

Coordinates are always [longitude, latitude]. Wire names are camelCase
(``busNumber``, ``nextStopIndex``...), Python attributes are snake_case.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator
from pydantic.alias_generators import to_camel


class BusStatus(str, Enum):
    """Service status of a bus."""
    ON_TIME = "On Time"
    DELAYED = "Delayed"
    EARLY = "Early"
    AT_RISK = "At Risk"


class GeoPoint(BaseModel):
    """Geographic point, serialized as ``[longitude, latitude]``."""

    lon: float = Field(..., ge=-180, le=180, description="Longitud en grados decimales")
    lat: float = Field(..., ge=-90, le=90, description="Latitud en grados decimales")

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            if len(value) != 2:
                raise ValueError("coordinates must be a [longitude, latitude] pair")
            return {"lon": value[0], "lat": value[1]}
        if isinstance(value, dict) and "coordinates" in value:
            return cls._from_pair(value["coordinates"])
        return value

    @model_validator(mode="after")
    def _finite(self) -> "GeoPoint":
        if not (math.isfinite(self.lon) and math.isfinite(self.lat)):
            raise ValueError("coordinates must be finite numbers")
        return self

    @model_serializer
    def _to_pair(self) -> List[float]:
        return [self.lon, self.lat]

    def as_tuple(self):
        return (self.lon, self.lat)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Stop(_CamelModel):
    """Fixed stop of a route."""
    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    location: GeoPoint


class Bus(_CamelModel):
    """Simulated bus. Mutated in place by the simulation ticks."""
    bus_number: str
    current_location: GeoPoint
    next_stop_index: int = Field(default=0, ge=0)
    passenger_count: int = Field(default=0, ge=0)
    status: BusStatus = BusStatus.ON_TIME
    recommendation: Optional[str] = None
    last_updated: datetime = Field(default_factory=datetime.utcnow)


class Route(_CamelModel):
    """Loop route with its stops and fleet."""
    route_name: str = Field(..., min_length=1)
    ideal_headway_minutes: float = Field(default=10, gt=0)
    stops: List[Stop] = Field(default_factory=list)
    buses: List[Bus] = Field(default_factory=list)

    def stop_for(self, bus: Bus) -> Stop:
        """Target stop of ``bus``; the index always wraps around the loop."""
        return self.stops[bus.next_stop_index % len(self.stops)]


class NearbyStop(_CamelModel):
    """Stop found by a proximity search."""
    stop_id: str
    name: str
    route_name: str
    location: GeoPoint
    distance_meters: int
    walking_time_minutes: int


class BusSystemDataResponse(BaseModel):
    success: bool = True
    data: List[Route]


class NearbyStopsResponse(BaseModel):
    success: bool = True
    data: List[NearbyStop]


class MessageResponse(BaseModel):
    success: bool
    message: str
    error: Optional[str] = None
