"""
Data models for the bus system.
"""

from models.bus_system import (
    BusStatus,
    GeoPoint,
    Stop,
    Bus,
    Route,
    NearbyStop,
    BusSystemDataResponse,
    NearbyStopsResponse,
    MessageResponse,
)

__all__ = [
    'BusStatus',
    'GeoPoint',
    'Stop',
    'Bus',
    'Route',
    'NearbyStop',
    'BusSystemDataResponse',
    'NearbyStopsResponse',
    'MessageResponse',
]
