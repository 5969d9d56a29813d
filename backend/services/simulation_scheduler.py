"""
Periodic execution of the simulation ticks.

Two independent repeating asyncio tasks drive the position tick and the
headway tick. When an interval fires while the previous tick of the same
kind is still running, the new tick is skipped rather than queued.

Usage:
    scheduler = SimulationScheduler(registry, advancer, analyzer)
    scheduler.start()        # inside a running event loop
    ...
    await scheduler.stop()
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from config.simulation import simulation_config
from services.headway_analyzer import HeadwayAnalyzer
from services.position_advancer import PositionAdvancer
from services.route_registry import RouteRegistry

logger = logging.getLogger(__name__)


@dataclass
class PeriodicJob:
    """Runtime state of one repeating tick."""
    name: str
    interval: float
    tick: Callable[[], Awaitable[Any]]
    loop_task: Optional[asyncio.Task] = None
    in_flight: Optional[asyncio.Task] = None
    runs: int = 0
    skipped: int = 0
    failures: int = 0
    last_started_at: Optional[datetime] = None
    last_finished_at: Optional[datetime] = None
    last_result: Optional[dict] = None

    @property
    def is_busy(self) -> bool:
        return self.in_flight is not None and not self.in_flight.done()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "interval_seconds": self.interval,
            "runs": self.runs,
            "skipped": self.skipped,
            "failures": self.failures,
            "in_flight": self.is_busy,
            "last_started_at": self.last_started_at.isoformat() if self.last_started_at else None,
            "last_finished_at": self.last_finished_at.isoformat() if self.last_finished_at else None,
            "last_result": self.last_result,
        }


class SimulationScheduler:
    """Owns the position and headway timers. At most one simulation runs."""

    def __init__(
        self,
        registry: RouteRegistry,
        advancer: PositionAdvancer,
        analyzer: HeadwayAnalyzer,
        position_interval: Optional[float] = None,
        headway_interval: Optional[float] = None,
    ):
        self._registry = registry
        self._jobs = {
            "position": PeriodicJob(
                name="position",
                interval=position_interval or simulation_config.POSITION_TICK_SECONDS,
                tick=lambda: advancer.advance_tick(registry),
            ),
            "headway": PeriodicJob(
                name="headway",
                interval=headway_interval or simulation_config.HEADWAY_TICK_SECONDS,
                tick=lambda: analyzer.analyze_tick(registry),
            ),
        }

    @property
    def is_running(self) -> bool:
        return any(
            job.loop_task is not None and not job.loop_task.done() for job in self._jobs.values()
        )

    def start(self) -> bool:
        """
        Register both timers. Idempotent: returns False without doing
        anything when the timers are already registered.
        """
        if self.is_running:
            logger.debug("[Sim] Simulation already running")
            return False

        logger.info("[Sim] Bus simulation and analysis service starting...")
        for job in self._jobs.values():
            job.loop_task = asyncio.create_task(self._run_periodic(job), name=f"sim_{job.name}_timer")
        return True

    async def stop(self) -> bool:
        """Cancel both timers and abandon in-flight ticks."""
        tasks = []
        for job in self._jobs.values():
            for task in (job.loop_task, job.in_flight):
                if task is not None and not task.done():
                    task.cancel()
                    tasks.append(task)
            job.loop_task = None
            job.in_flight = None

        if not tasks:
            return False
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("[Sim] Simulation stopped")
        return True

    async def _run_periodic(self, job: PeriodicJob) -> None:
        while True:
            await asyncio.sleep(job.interval)
            if job.is_busy:
                job.skipped += 1
                logger.warning(f"[Sim] {job.name} tick still running, skipping this interval")
                continue
            job.in_flight = asyncio.create_task(self._run_tick(job), name=f"sim_{job.name}_tick")

    async def _run_tick(self, job: PeriodicJob) -> None:
        job.last_started_at = datetime.utcnow()
        try:
            result = await job.tick()
            job.runs += 1
            if hasattr(result, "as_dict"):
                job.last_result = result.as_dict()
        except asyncio.CancelledError:
            raise
        except Exception:
            job.failures += 1
            logger.exception(f"[Sim] {job.name} tick failed")
        finally:
            job.last_finished_at = datetime.utcnow()

    def status(self) -> Dict[str, Any]:
        return {
            "running": self.is_running,
            "routes": len(self._registry.route_names()),
            "jobs": {name: job.snapshot() for name, job in self._jobs.items()},
        }
