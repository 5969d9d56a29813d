"""
OSRM service for bus travel-time estimation.

The estimator never fails: any routing error degrades to a fixed fallback
duration so a simulation tick can always complete.
"""

import asyncio
import logging
import math
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import httpx

from config.osrm import osrm_config
from models import GeoPoint

logger = logging.getLogger(__name__)


def traffic_factor(hour: int) -> float:
    """Congestion multiplier for a wall-clock hour (0-23)."""
    for start, end in osrm_config.RUSH_HOUR_WINDOWS:
        if start <= hour < end:
            return osrm_config.RUSH_HOUR_FACTOR
    return osrm_config.OFF_PEAK_FACTOR


class OSRMService:
    """Travel-time estimator backed by the OSRM route API."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._http_client = http_client
        self._clock = clock
        self._stats = {'requests': 0, 'fallbacks': 0, 'errors': 0}

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=osrm_config.TIMEOUT_SECONDS,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10)
            )
        return self._http_client

    def current_traffic_factor(self) -> float:
        return traffic_factor(self._clock().hour)

    def _fallback(self, reason: str) -> float:
        self._stats['fallbacks'] += 1
        logger.warning(f"[OSRM] {reason}, using default duration")
        return osrm_config.FALLBACK_DURATION_SECONDS

    async def estimate_duration(self, start: GeoPoint, end: GeoPoint) -> float:
        """Estimated driving time in seconds from ``start`` to ``end``."""
        base = await self._fetch_base_duration(start, end)
        if base is None:
            return self._fallback("Routing unavailable")
        return base * self.current_traffic_factor()

    async def _fetch_base_duration(self, start: GeoPoint, end: GeoPoint) -> Optional[float]:
        url = f"{osrm_config.get_route_url()}/{start.lon},{start.lat};{end.lon},{end.lat}"
        params = {"overview": "false"}
        self._stats['requests'] += 1

        attempts = max(1, osrm_config.MAX_RETRIES)
        for attempt in range(attempts):
            try:
                client = await self._get_client()
                response = await client.get(url, params=params, timeout=osrm_config.TIMEOUT_SECONDS)

                if response.is_success:
                    duration = self._parse_duration(response.json())
                    if duration is not None:
                        return duration
                    logger.warning(f"[OSRM] Malformed response (attempt {attempt + 1})")
                else:
                    logger.warning(f"[OSRM] HTTP {response.status_code} (attempt {attempt + 1})")
            except httpx.TimeoutException:
                logger.warning(f"[OSRM] Timeout (attempt {attempt + 1})")
            except Exception as e:
                logger.error(f"[OSRM] Error: {e}")
                self._stats['errors'] += 1

            if attempt < attempts - 1:
                await asyncio.sleep(osrm_config.RETRY_DELAY_SECONDS * (attempt + 1))

        return None

    @staticmethod
    def _parse_duration(data: Any) -> Optional[float]:
        if not isinstance(data, dict) or data.get('code') != 'Ok':
            return None
        routes = data.get('routes')
        if not isinstance(routes, list) or not routes or not isinstance(routes[0], dict):
            return None
        duration = routes[0].get('duration')
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            return None
        if not math.isfinite(duration) or duration <= 0:
            return None
        return float(duration)

    async def health_check(self) -> Dict[str, Any]:
        """Probe OSRM with a short fixed leg."""
        start = time.time()
        test_start = GeoPoint(lon=77.446, lat=28.628)
        test_end = GeoPoint(lon=77.45, lat=28.63)
        base = await self._fetch_base_duration(test_start, test_end)
        response_time = (time.time() - start) * 1000
        return {
            'status': 'healthy' if base is not None else 'degraded',
            'response_time_ms': response_time,
            'base_url': osrm_config.BASE_URL,
            'traffic_factor': self.current_traffic_factor(),
            'error': None if base is not None else "OSRM unavailable, fallback duration in use",
        }

    def get_stats(self) -> Dict[str, int]:
        return self._stats.copy()

    async def close(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()


_osrm_service: Optional[OSRMService] = None


def get_osrm_service() -> OSRMService:
    global _osrm_service
    if _osrm_service is None:
        _osrm_service = OSRMService()
    return _osrm_service


async def close_osrm_service() -> None:
    global _osrm_service
    if _osrm_service:
        await _osrm_service.close()
        _osrm_service = None
