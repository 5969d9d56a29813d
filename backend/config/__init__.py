"""
Configuration package.

All settings are read from environment variables at import time.
"""

from .osrm import OSRMConfig, osrm_config
from .simulation import SimulationConfig, simulation_config


__all__ = [
    "OSRMConfig",
    "osrm_config",
    "SimulationConfig",
    "simulation_config",
]
