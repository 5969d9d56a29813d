"""
Pytest configuration and shared fixtures for the bus system tests.
"""
import os
import sys
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

import pytest

# Keep imports side-effect free: no database file, no auto-started timers.
os.environ.setdefault("USE_DATABASE", "false")
os.environ.setdefault("SIMULATION_AUTOSTART", "false")

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from models import Bus, GeoPoint, Route, Stop
from services.route_registry import RouteRegistry


# ============================================================
# TEST DOUBLES
# ============================================================

class FakeEstimator:
    """
    Travel-time estimator returning canned durations.

    ``durations`` maps a target ``(lon, lat)`` to seconds; anything else
    gets ``default``. Every call is recorded.
    """

    def __init__(self, default: float = 300.0, durations: Optional[Dict[Tuple[float, float], float]] = None):
        self.default = default
        self.durations = durations or {}
        self.calls: List[Tuple[GeoPoint, GeoPoint]] = []

    async def estimate_duration(self, start: GeoPoint, end: GeoPoint) -> float:
        self.calls.append((start, end))
        return self.durations.get(end.as_tuple(), self.default)


class SequenceRng:
    """random.Random stand-in returning a fixed sequence from randint."""

    def __init__(self, values: List[int]):
        self.values = list(values)
        self.calls: List[Tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        return self.values.pop(0)


class FailingPersistence:
    """Persistence whose saves fail for selected routes."""

    def __init__(self, failing: Optional[set] = None):
        self.failing = failing or set()
        self.saved: List[str] = []

    def load_routes(self) -> List[Route]:
        return []

    def save_route(self, route: Route) -> None:
        if route.route_name in self.failing:
            raise RuntimeError(f"disk full while saving {route.route_name}")
        self.saved.append(route.route_name)

    def replace_all(self, routes: List[Route]) -> None:
        self.saved = []

    def find_route_names_near(self, point: GeoPoint, radius_m: float) -> List[str]:
        return []


# ============================================================
# FIXTURES FOR ROUTES
# ============================================================

def make_stops(coords: List[Tuple[float, float]], prefix: str = "S") -> List[Stop]:
    return [
        Stop(id=f"{prefix}{i}", name=f"Stop {prefix}{i}", location=GeoPoint(lon=lon, lat=lat))
        for i, (lon, lat) in enumerate(coords)
    ]


def make_bus(number: str, location: Tuple[float, float], next_stop_index: int = 0, **kwargs) -> Bus:
    return Bus(
        bus_number=number,
        current_location=GeoPoint(lon=location[0], lat=location[1]),
        next_stop_index=next_stop_index,
        **kwargs,
    )


@pytest.fixture
def loop_coords() -> List[Tuple[float, float]]:
    """Five stops roughly 0.01 degrees apart."""
    return [
        (77.446, 28.628),
        (77.456, 28.628),
        (77.456, 28.638),
        (77.446, 28.638),
        (77.440, 28.633),
    ]


@pytest.fixture
def loop_route(loop_coords) -> Route:
    """Five-stop loop with two buses, next stops 0 and 2."""
    stops = make_stops(loop_coords)
    return Route(
        route_name="Loop 5",
        ideal_headway_minutes=8,
        stops=stops,
        buses=[
            make_bus("L-1", (77.440, 28.628), next_stop_index=0, passenger_count=10),
            make_bus("L-2", (77.456, 28.632), next_stop_index=2, passenger_count=20),
        ],
    )


@pytest.fixture
def registry(loop_route) -> RouteRegistry:
    reg = RouteRegistry()
    reg.load([loop_route])
    return reg


@pytest.fixture
def fake_estimator() -> FakeEstimator:
    return FakeEstimator()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    stamp = datetime(2026, 3, 2, 12, 0, 0)
    return lambda: stamp


# ============================================================
# TEST CONFIGURATION
# ============================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
