# navigator.py
# Public entry point for the tracking system.
# Owns no business logic; delegates everything to specialist modules.

import logging
from typing import Callable, List, Optional, Tuple

from .models import Coord, LocationFix, ProgressResult, RouteStep, parse_directions
from .nav_config import NavConfig
from .nav_logger import NavLogger
from .polyline_codec import route_polyline, with_precise_ends
from .route_tracker import RouteTracker

logger = logging.getLogger(__name__)


class NavigationSystem:
    """
    High-level tracking facade.

    Typical lifecycle:
        nav = NavigationSystem(config)
        nav.start_navigation(directions_json, precise_start=gps_coord)

        # Location loop:
        result = nav.update(Coord(lat, lon))
        if result.recalculate:
            ...fetch a new route and call start_navigation() again

    Args:
        config:           Optional NavConfig; defaults to NavConfig().
        is_caller_active: Liveness check of the owning screen/session.  When it
                          returns False, updates never ask for recalculation.
    """

    def __init__(
        self,
        config: Optional[NavConfig] = None,
        is_caller_active: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.config = config or NavConfig()

        # Specialist modules
        self._tracker = RouteTracker(self.config, is_caller_active=is_caller_active)
        self._logger  = NavLogger(self.config)

    # ------------------------------------------------------------------
    # Navigation control
    # ------------------------------------------------------------------

    def start_navigation(
        self,
        directions: dict,
        precise_start: Optional[Coord] = None,
        precise_end: Optional[Coord] = None,
    ) -> Tuple[bool, str]:
        """
        Begin tracking the first route of a Directions API response.

        The step polylines are joined and tracked, since their vertices
        include every step end location that step pruning matches against.
        The overview polyline is a simplified shape and is used only when no
        step carries a polyline.

        Args:
            directions:    Decoded JSON body of the directions response.
            precise_start: GPS fix to put in front of the decoded polyline.
            precise_end:   Exact destination to append after it.

        Returns:
            (success, message)
        """
        try:
            route = parse_directions(directions)
        except ValueError as e:
            logger.warning(f"Directions response rejected: {e}")
            return False, str(e)

        has_step_geometry = any(s.encoded_polyline for s in route.steps)
        if route.overview_polyline and not has_step_geometry:
            polyline = self._decode_overview(route.overview_polyline, precise_start, precise_end)
            if polyline is None:
                return False, "Overview polyline could not be decoded."
            return self._load(route.steps, polyline)

        return self.start_navigation_from_steps(route.steps, precise_start, precise_end)

    def start_navigation_from_steps(
        self,
        steps: List[RouteStep],
        precise_start: Optional[Coord] = None,
        precise_end: Optional[Coord] = None,
    ) -> Tuple[bool, str]:
        """Begin tracking a route given as already-parsed steps."""
        try:
            polyline = route_polyline(
                steps, precise_start, precise_end, self.config.polyline_precision
            )
        except ValueError as e:
            logger.warning(f"Step polyline could not be decoded: {e}")
            return False, str(e)
        return self._load(steps, polyline)

    def stop_navigation(self) -> None:
        """Forcibly end the current tracking session."""
        self._tracker.stop()
        logger.info("Navigation stopped by user.")

    def _decode_overview(
        self,
        encoded: str,
        precise_start: Optional[Coord],
        precise_end: Optional[Coord],
    ) -> Optional[List[Coord]]:
        try:
            if precise_start is not None and precise_end is not None:
                return with_precise_ends(
                    encoded, precise_start, precise_end, self.config.polyline_precision
                )
            # Only one (or neither) end known: reuse the step assembly path.
            return route_polyline(
                [RouteStep(encoded_polyline=encoded)],
                precise_start,
                precise_end,
                self.config.polyline_precision,
            )
        except ValueError as e:
            logger.warning(f"Overview polyline could not be decoded: {e}")
            return None

    def _load(self, steps: List[RouteStep], polyline: List[Coord]) -> Tuple[bool, str]:
        if len(polyline) < 2:
            msg = "Route has fewer than two points."
            logger.warning(msg)
            return False, msg

        self._tracker.load_route(polyline, steps)
        self._logger.save_route(steps, polyline)

        first = steps[0].instructions if steps else None
        logger.info(f"Route ready: {len(steps)} steps, {len(polyline)} points. First: {first}")
        return True, f"Route ready. {len(steps)} steps."

    # ------------------------------------------------------------------
    # Position update: call this on every location fix
    # ------------------------------------------------------------------

    def update(self, position: Coord) -> ProgressResult:
        """
        Process a new position and return the current navigation status.

        Args:
            position: Current geographic coordinate.

        Returns:
            ProgressResult containing RouteStatus, message, and step info.
        """
        result = self._tracker.check_progress(position)
        self._logger.log_event(result, position)
        return result

    def update_from_fix(self, fix: LocationFix) -> ProgressResult:
        """Same as update(), for a raw location-provider reading."""
        if not fix.has_position:
            logger.warning("Location fix without latitude/longitude; measuring from (0, 0).")
        return self.update(fix.to_coord())

    # ------------------------------------------------------------------
    # Convenience read-only properties
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._tracker.is_active

    @property
    def remaining_steps(self) -> int:
        return self._tracker.remaining_steps

    @property
    def remaining_polyline(self) -> List[Coord]:
        return self._tracker.polyline
