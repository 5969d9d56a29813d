"""
Simulation and headway analysis settings.
"""

import os
from typing import Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes", "on")


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


class SimulationConfig:
    """Tick cadence, bunching thresholds and proximity search defaults."""

    POSITION_TICK_SECONDS: float = float(os.getenv("SIM_POSITION_TICK_SECONDS", "15"))
    HEADWAY_TICK_SECONDS: float = float(os.getenv("SIM_HEADWAY_TICK_SECONDS", "30"))
    AUTOSTART: bool = _env_bool("SIMULATION_AUTOSTART", "true")

    # Coordinate-space units (degrees), not meters.
    ARRIVAL_THRESHOLD: float = float(os.getenv("SIM_ARRIVAL_THRESHOLD", "0.001"))

    # Boarding/alighting delta drawn per stop arrival, inclusive bounds.
    PASSENGER_DELTA_MIN: int = int(os.getenv("SIM_PASSENGER_DELTA_MIN", "-4"))
    PASSENGER_DELTA_MAX: int = int(os.getenv("SIM_PASSENGER_DELTA_MAX", "5"))
    RANDOM_SEED: Optional[int] = _env_optional_int("SIM_RANDOM_SEED")

    BUNCHING_THRESHOLD_MINUTES: float = float(os.getenv("SIM_BUNCHING_THRESHOLD_MINUTES", "2"))
    # Approximate average inter-stop travel time. Heuristic, not derived.
    INTER_STOP_SECONDS: float = float(os.getenv("SIM_INTER_STOP_SECONDS", "300"))
    MAX_STOP_DIFF: int = int(os.getenv("SIM_MAX_STOP_DIFF", "3"))
    HOLD_ROUNDING_SECONDS: int = int(os.getenv("SIM_HOLD_ROUNDING_SECONDS", "15"))
    MIN_HOLD_SECONDS: int = int(os.getenv("SIM_MIN_HOLD_SECONDS", "30"))

    # Guard around each travel-time await inside a tick.
    ESTIMATE_TIMEOUT_SECONDS: float = float(os.getenv("SIM_ESTIMATE_TIMEOUT", "5.0"))

    DEFAULT_SEARCH_RADIUS_KM: float = float(os.getenv("SIM_DEFAULT_SEARCH_RADIUS_KM", "2.0"))
    WALKING_SPEED_MPS: float = float(os.getenv("SIM_WALKING_SPEED_MPS", "1.4"))

    @classmethod
    def get_config_dict(cls) -> dict:
        return {
            "POSITION_TICK_SECONDS": cls.POSITION_TICK_SECONDS,
            "HEADWAY_TICK_SECONDS": cls.HEADWAY_TICK_SECONDS,
            "AUTOSTART": cls.AUTOSTART,
            "ARRIVAL_THRESHOLD": cls.ARRIVAL_THRESHOLD,
            "BUNCHING_THRESHOLD_MINUTES": cls.BUNCHING_THRESHOLD_MINUTES,
            "INTER_STOP_SECONDS": cls.INTER_STOP_SECONDS,
            "MAX_STOP_DIFF": cls.MAX_STOP_DIFF,
            "HOLD_ROUNDING_SECONDS": cls.HOLD_ROUNDING_SECONDS,
            "MIN_HOLD_SECONDS": cls.MIN_HOLD_SECONDS,
            "DEFAULT_SEARCH_RADIUS_KM": cls.DEFAULT_SEARCH_RADIUS_KM,
            "WALKING_SPEED_MPS": cls.WALKING_SPEED_MPS,
        }


simulation_config = SimulationConfig()
