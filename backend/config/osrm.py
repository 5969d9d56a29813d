"""
Configuration for the OSRM (Open Source Routing Machine) travel-time client.
"""

import os


class OSRMConfig:
    """Configuration class for OSRM integration."""

    BASE_URL: str = os.getenv("OSRM_BASE_URL", "http://router.project-osrm.org")
    ROUTE_URL: str = os.getenv("OSRM_ROUTE_URL", f"{BASE_URL}/route/v1/driving")

    # Each routing call is bounded; a slow OSRM must never stall a tick.
    TIMEOUT_SECONDS: float = float(os.getenv("OSRM_TIMEOUT", "3.0"))
    MAX_RETRIES: int = int(os.getenv("OSRM_MAX_RETRIES", "1"))
    RETRY_DELAY_SECONDS: float = float(os.getenv("OSRM_RETRY_DELAY", "0.5"))

    FALLBACK_DURATION_SECONDS: float = float(os.getenv("OSRM_FALLBACK_DURATION", "300"))

    # Traffic multipliers by wall-clock hour: [start, end) windows.
    RUSH_HOUR_WINDOWS = ((7, 10), (16, 19))
    RUSH_HOUR_FACTOR: float = float(os.getenv("OSRM_RUSH_HOUR_FACTOR", "1.5"))
    OFF_PEAK_FACTOR: float = float(os.getenv("OSRM_OFF_PEAK_FACTOR", "1.1"))

    @classmethod
    def get_route_url(cls) -> str:
        return cls.ROUTE_URL

    @classmethod
    def is_self_hosted(cls) -> bool:
        return "router.project-osrm.org" not in cls.BASE_URL

    @classmethod
    def get_config_dict(cls) -> dict:
        return {
            "BASE_URL": cls.BASE_URL,
            "ROUTE_URL": cls.ROUTE_URL,
            "TIMEOUT_SECONDS": cls.TIMEOUT_SECONDS,
            "MAX_RETRIES": cls.MAX_RETRIES,
            "FALLBACK_DURATION_SECONDS": cls.FALLBACK_DURATION_SECONDS,
            "RUSH_HOUR_FACTOR": cls.RUSH_HOUR_FACTOR,
            "OFF_PEAK_FACTOR": cls.OFF_PEAK_FACTOR,
            "IS_SELF_HOSTED": cls.is_self_hosted(),
        }


osrm_config = OSRMConfig()
