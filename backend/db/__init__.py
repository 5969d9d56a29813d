"""
Database module for the bus system backend.

This module provides SQLite/PostgreSQL persistence using SQLAlchemy.
It can be disabled by setting USE_DATABASE=false in environment variables.
"""

from .models import (
    Base,
    BusRouteModel,
    BusStopModel,
    BusModel,
)
from . import crud
from .repository import RouteRepository

__all__ = [
    "Base",
    "BusRouteModel",
    "BusStopModel",
    "BusModel",
    "crud",
    "RouteRepository",
]
