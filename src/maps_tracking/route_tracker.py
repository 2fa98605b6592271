# route_tracker.py
# Deviation detection, polyline trimming and step pruning.
# The module-level functions work on caller-owned lists; RouteTracker wraps
# them in a per-session state machine.  Call load_route() once, then
# check_progress() on every position update.

import logging
from typing import Callable, List, Optional

from .geo_utils import rounded_distance_km
from .models import Coord, DeviationResult, ProgressResult, RouteStatus, RouteStep
from .nav_config import DEVIATION_THRESHOLD_KM, STEP_MATCH_DECIMALS, NavConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stateless operations
# ---------------------------------------------------------------------------

def check_route(
    position: Coord,
    polyline: List[Coord],
    is_caller_active: Optional[Callable[[], bool]] = None,
    threshold_km: float = DEVIATION_THRESHOLD_KM,
) -> DeviationResult:
    """
    Trim passed points off the front of polyline and detect a deviation.

    The agent counts as progressing while it is closer to the next vertex
    than to the current one; each such vertex is removed in place.  The scan
    stops at the first vertex that is not passed.  If the agent is more than
    threshold_km away from that vertex, a new route is needed.

    Args:
        position:         Current position of the agent.
        polyline:         Remaining route in travel order.  Mutated in place;
                          the caller must own it for the duration of the call.
        is_caller_active: Liveness of the caller, consulted once before
                          returning.  None means always active.
        threshold_km:     Deviation threshold.

    Returns:
        DeviationResult with the recalculation flag and the trimmed polyline.
    """
    recalculate = False

    i = 0
    while len(polyline) > 1:
        if i + 1 == len(polyline):
            # End of route: no recalculation regardless of distance.
            return DeviationResult(recalculate=False, polyline=polyline)

        d1 = rounded_distance_km(position, polyline[i])
        d2 = rounded_distance_km(position, polyline[i + 1])

        if d1 > d2:
            logger.debug(f"Passed {polyline[i]} ({d1} km > {d2} km).")
            del polyline[i]
            continue

        if d1 > threshold_km:
            logger.info(f"Deviation of {d1} km from route; recalculation needed.")
            recalculate = True
        break

    if is_caller_active is not None and not is_caller_active():
        return DeviationResult(recalculate=False, polyline=polyline)

    return DeviationResult(recalculate=recalculate, polyline=polyline)


def _round_coord(coord: Coord, decimals: int) -> Coord:
    return Coord(
        float(f"{coord.lat:.{decimals}f}"),
        float(f"{coord.lon:.{decimals}f}"),
    )


def prune_completed_steps(
    steps: List[RouteStep],
    polyline: List[Coord],
    decimals: int = STEP_MATCH_DECIMALS,
) -> List[RouteStep]:
    """
    Drop the first step once its end point is no longer on the polyline.

    Only the first step is inspected, so at most one step goes per call.
    The list is modified in place and also returned.

    Raises:
        ValueError: If the first step has no end_location.
    """
    if not steps:
        return steps

    step = steps[0]
    if step.end_location is None:
        raise ValueError("First route step has no end_location.")

    if _round_coord(step.end_location, decimals) in polyline:
        return steps

    del steps[0]
    logger.info(f"Step completed: {step.instructions or step.maneuver}. {len(steps)} left.")
    return steps


def distance_to_step_end(step: RouteStep, position: Coord) -> float:
    """
    Rounded kilometres from position to the end of step.

    Raises:
        ValueError: If step has no end_location.
    """
    if step.end_location is None:
        raise ValueError("Route step has no end_location.")
    return rounded_distance_km(position, step.end_location)


# ---------------------------------------------------------------------------
# Stateful tracker
# ---------------------------------------------------------------------------

class RouteTracker:
    """
    Progress tracker for a single navigation session.

    Usage:
        tracker = RouteTracker(config)
        tracker.load_route(polyline, steps)

        # Inside the location loop:
        result = tracker.check_progress(current_coord)
    """

    def __init__(
        self,
        config: Optional[NavConfig] = None,
        is_caller_active: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.config = config or NavConfig()
        self._is_caller_active = is_caller_active
        self._polyline: List[Coord] = []
        self._steps: List[RouteStep] = []
        self._active: bool = False

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def load_route(self, polyline: List[Coord], steps: Optional[List[RouteStep]] = None) -> None:
        """Load a new route and reset state.  Both lists are copied."""
        self._polyline = list(polyline)
        self._steps = list(steps or [])
        self._active = True

    def stop(self) -> None:
        """Forcibly end tracking."""
        self._active = False

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def current_step(self) -> Optional[RouteStep]:
        return self._steps[0] if self._steps else None

    @property
    def remaining_steps(self) -> int:
        return len(self._steps)

    @property
    def remaining_points(self) -> int:
        return len(self._polyline)

    @property
    def polyline(self) -> List[Coord]:
        return list(self._polyline)

    @property
    def steps(self) -> List[RouteStep]:
        return list(self._steps)

    def _arrived(self, position: Coord) -> bool:
        """
        True once the agent is within arrival range of the final point.

        With more than one step left the final step has not started yet, so a
        route ending near its start (a loop) does not finish immediately.
        """
        if not self._polyline:
            return True
        if len(self._steps) > 1:
            return False
        last = self._polyline[-1]
        return rounded_distance_km(position, last) <= self.config.arrival_threshold_km

    # ------------------------------------------------------------------
    # Core method: call on every position update
    # ------------------------------------------------------------------

    def check_progress(self, position: Coord) -> ProgressResult:
        """
        Trim the route against position and report where the agent stands.

        Args:
            position: Current geographic position.

        Returns:
            ProgressResult with status, message, and contextual data.
        """
        if not self._active:
            return ProgressResult(
                status=RouteStatus.INACTIVE,
                message="Navigation is not active.",
            )

        deviation = check_route(
            position,
            self._polyline,
            is_caller_active=self._is_caller_active,
            threshold_km=self.config.deviation_threshold_km,
        )
        prune_completed_steps(self._steps, self._polyline, self.config.step_match_decimals)

        step = self.current_step
        step_km = None
        if step is not None and step.end_location is not None:
            step_km = distance_to_step_end(step, position)

        # 1. Off route
        if deviation.recalculate:
            return ProgressResult(
                status=RouteStatus.OFF_ROUTE,
                message="You are off the route. Recalculating may be needed.",
                recalculate=True,
                distance_to_step_km=step_km,
                current_step=step,
                remaining_points=len(self._polyline),
            )

        # 2. Destination reached.  Decided by distance to the final point, since
        # vertices closer than the rounding step are never trimmed.
        if self._arrived(position):
            self._active = False
            return ProgressResult(
                status=RouteStatus.FINISHED,
                message="You have reached your destination.",
                distance_to_step_km=step_km,
                current_step=step,
                remaining_points=len(self._polyline),
            )

        # 3. Still on route
        if step is not None and step_km is not None:
            message = f"{step_km} km: {step.instructions or 'continue'}"
        else:
            message = "Continue on route."
        return ProgressResult(
            status=RouteStatus.ON_ROUTE,
            message=message,
            distance_to_step_km=step_km,
            current_step=step,
            remaining_points=len(self._polyline),
        )
