"""
Headway and bunching analysis.

Buses of a route are ordered by ``next_stop_index`` as a proxy for their
position along the loop, and every bus is compared with the one ahead of
it (circularly). The predicted headway is

    stop_diff * INTER_STOP_SECONDS + time_to_next(trailing) - time_to_next(leading)

where INTER_STOP_SECONDS (300 by default) is a coarse average inter-stop
travel time. It is an approximation kept for behavioral compatibility,
not a physically derived constant.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from config.simulation import simulation_config
from models import Bus, BusStatus, Route
from services.route_registry import RouteRegistry
from services.tick_support import TickReport, TravelTimeEstimator, bounded_estimate, sync_route

logger = logging.getLogger(__name__)


@dataclass
class HeadwayAssessment:
    """Result of comparing one trailing bus with the bus ahead of it."""
    route_name: str
    leading_bus: str
    trailing_bus: str
    stop_diff: int
    predicted_headway_seconds: float
    status: BusStatus
    hold_seconds: Optional[int] = None
    recommendation_issued: bool = False


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_hold_seconds(
    predicted_headway_seconds: float,
    threshold_seconds: float,
    increment: Optional[int] = None,
) -> int:
    """Hold time that restores the threshold, rounded to ``increment`` seconds."""
    increment = increment or simulation_config.HOLD_ROUNDING_SECONDS
    return round_half_up((threshold_seconds - predicted_headway_seconds) / increment) * increment


def hold_recommendation(hold_seconds: int) -> str:
    return f"Risk of bunching. HOLD at next stop for {hold_seconds}s."


class HeadwayAnalyzer:
    """Classifies bunching risk and issues hold recommendations."""

    def __init__(
        self,
        estimator: TravelTimeEstimator,
        threshold_minutes: Optional[float] = None,
    ):
        self._estimator = estimator
        self.threshold_minutes = threshold_minutes or simulation_config.BUNCHING_THRESHOLD_MINUTES
        self.last_assessments: List[HeadwayAssessment] = []

    @property
    def threshold_seconds(self) -> float:
        return self.threshold_minutes * 60

    async def analyze_tick(self, registry: RouteRegistry) -> TickReport:
        report = TickReport(kind="headway")
        assessments: List[HeadwayAssessment] = []
        for route in registry.routes():
            if len(route.buses) < 2 or not route.stops:
                logger.debug(f"[Headway] Skipping route {route.route_name}: fewer than 2 buses")
                report.routes_skipped += 1
                continue
            async with registry.lock_for(route.route_name):
                route_assessments = await self.analyze_route(route)
                await sync_route(registry, route, report)
            assessments.extend(route_assessments)
            report.routes_processed += 1
            report.buses_updated += len(route.buses)
        self.last_assessments = assessments
        return report

    async def analyze_route(self, route: Route) -> List[HeadwayAssessment]:
        ordered = sorted(route.buses, key=lambda b: b.next_stop_index)
        n = len(ordered)
        assessments = []
        for i in range(n):
            trailing = ordered[i]
            leading = ordered[(i - 1) % n]
            assessments.append(await self._assess_pair(route, leading, trailing))
        return assessments

    async def _assess_pair(self, route: Route, leading: Bus, trailing: Bus) -> HeadwayAssessment:
        stop_count = len(route.stops)
        stop_diff = (trailing.next_stop_index - leading.next_stop_index) % stop_count

        time_to_next_leading = await bounded_estimate(
            self._estimator, leading.current_location, route.stop_for(leading).location
        )
        time_to_next_trailing = await bounded_estimate(
            self._estimator, trailing.current_location, route.stop_for(trailing).location
        )
        predicted = (
            stop_diff * simulation_config.INTER_STOP_SECONDS
            + time_to_next_trailing
            - time_to_next_leading
        )

        assessment = HeadwayAssessment(
            route_name=route.route_name,
            leading_bus=leading.bus_number,
            trailing_bus=trailing.bus_number,
            stop_diff=stop_diff,
            predicted_headway_seconds=predicted,
            status=BusStatus.ON_TIME,
        )

        if predicted / 60 < self.threshold_minutes and stop_diff < simulation_config.MAX_STOP_DIFF:
            assessment.status = BusStatus.AT_RISK
            leading.status = BusStatus.AT_RISK
            trailing.status = BusStatus.AT_RISK
            if not trailing.recommendation:
                hold = compute_hold_seconds(predicted, self.threshold_seconds)
                assessment.hold_seconds = hold
                if hold > simulation_config.MIN_HOLD_SECONDS:
                    trailing.recommendation = hold_recommendation(hold)
                    assessment.recommendation_issued = True
                    logger.info(
                        f"[Headway] {route.route_name}: bus {trailing.bus_number} "
                        f"{predicted:.0f}s behind {leading.bus_number}, hold {hold}s"
                    )
        else:
            leading.status = BusStatus.ON_TIME
            trailing.status = BusStatus.ON_TIME

        return assessment
