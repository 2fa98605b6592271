"""Tests for deviation detection, step pruning and the RouteTracker state machine."""

import pytest

from maps_tracking.geo_utils import distance_km
from maps_tracking.models import Coord, Quantity, RouteStatus, RouteStep
from maps_tracking.nav_config import NavConfig
from maps_tracking.route_tracker import (
    RouteTracker,
    check_route,
    distance_to_step_end,
    prune_completed_steps,
)

# Straight north, then east; ~90 m between vertices.
A = Coord(5.6037, -0.1870)
B = Coord(5.6045, -0.1870)
C = Coord(5.6053, -0.1870)
D = Coord(5.6053, -0.1862)
E = Coord(5.6053, -0.1854)
ROUTE = [A, B, C, D, E]


def _step(end, instructions="Turn right", maneuver=None):
    return RouteStep(
        distance=Quantity("1 km", 1000),
        duration=Quantity("5 mins", 300),
        start_location=Coord(5.6000, -0.1800),
        end_location=end,
        html_instructions=instructions,
        encoded_polyline="encoded_polyline",
        maneuver=maneuver,
    )


# ------------------------------------------------------------------
# check_route
# ------------------------------------------------------------------


class TestCheckRoute:
    def test_single_point_never_recalculates(self) -> None:
        polyline = [A]
        result = check_route(Coord(6.0, -1.0), polyline)
        assert result.recalculate is False
        assert result.polyline == [A]

    def test_empty_polyline(self) -> None:
        result = check_route(A, [])
        assert result.recalculate is False
        assert result.polyline == []

    def test_at_last_vertex_of_two(self) -> None:
        polyline = [Coord(5.6000, -0.1800), Coord(5.6037, -0.1870)]
        result = check_route(Coord(5.6037, -0.1870), polyline)
        assert result.recalculate is False
        assert result.polyline == [Coord(5.6037, -0.1870)]

    def test_at_last_vertex_trims_everything_before(self) -> None:
        polyline = [A, B, C]
        result = check_route(C, polyline)
        assert result.recalculate is False
        assert result.polyline == [C]

    def test_trims_in_place(self) -> None:
        polyline = list(ROUTE)
        result = check_route(B, polyline)
        assert result.polyline is polyline
        assert polyline == [B, C, D, E]

    def test_far_away_without_progress_recalculates(self) -> None:
        polyline = [Coord(5.6000, -0.1800), Coord(5.6037, -0.1870), Coord(5.6100, -0.1900)]
        result = check_route(Coord(5.0, 0.5), polyline)
        assert result.recalculate is True
        assert len(result.polyline) == 3

    def test_trims_then_detects_deviation(self) -> None:
        v0, v1, v2 = Coord(5.0, 0.0), Coord(5.6, 0.0), Coord(5.6, 1.0)
        polyline = [v0, v1, v2]
        result = check_route(Coord(5.7, 0.0), polyline)
        assert result.recalculate is True
        assert result.polyline == [v1, v2]

    def test_close_but_not_progressing_stays_on_route(self) -> None:
        polyline = [Coord(5.6037, -0.1870), Coord(5.6127, -0.1870)]
        result = check_route(Coord(5.6036, -0.1870), polyline)
        assert result.recalculate is False
        assert len(result.polyline) == 2

    def test_custom_threshold(self) -> None:
        polyline = [Coord(5.6037, -0.1870), Coord(5.6127, -0.1870)]
        result = check_route(Coord(5.6036, -0.1870), polyline, threshold_km=0.005)
        assert result.recalculate is True

    def test_compares_rounded_distances(self) -> None:
        origin = Coord(0.0, 0.0)
        far, near = Coord(0.0, 0.00012), Coord(0.0001, 0.0)
        assert distance_km(origin, far) > distance_km(origin, near)

        # Both round to 0.01 km, which is not progress.
        polyline = [far, near]
        result = check_route(origin, polyline)
        assert result.recalculate is False
        assert result.polyline == [far, near]

    def test_inactive_caller_suppresses_recalculation(self) -> None:
        v0, v1, v2 = Coord(5.0, 0.0), Coord(5.6, 0.0), Coord(5.6, 1.0)
        calls = []

        def is_active() -> bool:
            calls.append(True)
            return False

        result = check_route(Coord(5.7, 0.0), [v0, v1, v2], is_caller_active=is_active)
        assert result.recalculate is False
        assert result.polyline == [v1, v2]
        assert len(calls) == 1

    def test_active_caller_keeps_recalculation(self) -> None:
        polyline = [Coord(5.6000, -0.1800), Coord(5.6037, -0.1870)]
        result = check_route(Coord(5.0, 0.5), polyline, is_caller_active=lambda: True)
        assert result.recalculate is True


# ------------------------------------------------------------------
# prune_completed_steps
# ------------------------------------------------------------------


class TestPruneCompletedSteps:
    def test_empty_steps(self) -> None:
        steps = []
        assert prune_completed_steps(steps, [A]) is steps
        assert steps == []

    def test_step_still_on_polyline(self) -> None:
        steps = [_step(Coord(5.60370, -0.18700))]
        result = prune_completed_steps(steps, [Coord(5.6037, -0.1870)])
        assert len(result) == 1

    def test_step_end_rounded_to_five_decimals(self) -> None:
        steps = [_step(Coord(5.603704, -0.187002))]
        result = prune_completed_steps(steps, [A])
        assert len(result) == 1

    def test_step_off_polyline_removed_in_place(self) -> None:
        steps = [_step(Coord(5.6037, -0.1870))]
        result = prune_completed_steps(steps, [Coord(6.0, -1.0)])
        assert result == []
        assert steps == []

    def test_only_first_step_inspected(self) -> None:
        first, second = _step(A), _step(Coord(5.6100, -0.1900), "Continue straight")
        steps = [first, second]

        assert prune_completed_steps(steps, [A, Coord(5.6100, -0.1900)]) == [first, second]
        assert prune_completed_steps(steps, [C]) == [second]

    def test_missing_end_location(self) -> None:
        with pytest.raises(ValueError):
            prune_completed_steps([_step(None)], [A])


class TestDistanceToStepEnd:
    def test_positive_distance(self) -> None:
        step = _step(Coord(5.6127, -0.1870))
        assert distance_to_step_end(step, A) == 1.0

    def test_at_step_end(self) -> None:
        assert distance_to_step_end(_step(A), A) == 0.0

    def test_missing_end_location(self) -> None:
        with pytest.raises(ValueError):
            distance_to_step_end(_step(None), A)


# ------------------------------------------------------------------
# RouteTracker
# ------------------------------------------------------------------


def _loaded_tracker(**kwargs) -> RouteTracker:
    tracker = RouteTracker(NavConfig(), **kwargs)
    tracker.load_route(ROUTE, [_step(C, "Head north"), _step(E, "Turn right", None)])
    return tracker


class TestRouteTracker:
    def test_inactive_before_load(self) -> None:
        result = RouteTracker().check_progress(A)
        assert result.status == RouteStatus.INACTIVE

    def test_load_copies_lists(self) -> None:
        route = list(ROUTE)
        tracker = RouteTracker()
        tracker.load_route(route, [])
        tracker.check_progress(C)
        assert route == ROUTE
        assert tracker.polyline == [C, D, E]

    def test_at_start(self) -> None:
        tracker = _loaded_tracker()
        result = tracker.check_progress(A)
        assert result.status == RouteStatus.ON_ROUTE
        assert result.recalculate is False
        assert result.remaining_points == 5
        assert result.distance_to_step_km == 0.18
        assert result.current_step.instructions == "Head north"

    def test_full_trip(self) -> None:
        tracker = _loaded_tracker()

        result = tracker.check_progress(B)
        assert result.status == RouteStatus.ON_ROUTE
        assert tracker.polyline == [B, C, D, E]
        assert tracker.remaining_steps == 2

        result = tracker.check_progress(D)
        assert result.status == RouteStatus.ON_ROUTE
        assert tracker.polyline == [D, E]
        assert tracker.remaining_steps == 1
        assert result.current_step.instructions == "Turn right"
        assert result.distance_to_step_km == 0.09

        result = tracker.check_progress(E)
        assert result.status == RouteStatus.FINISHED
        assert tracker.is_active is False

        assert tracker.check_progress(E).status == RouteStatus.INACTIVE

    def test_off_route(self) -> None:
        tracker = _loaded_tracker()
        result = tracker.check_progress(Coord(5.6000, -0.1870))
        assert result.status == RouteStatus.OFF_ROUTE
        assert result.recalculate is True
        assert tracker.is_active is True

    def test_off_route_ignored_when_caller_inactive(self) -> None:
        tracker = _loaded_tracker(is_caller_active=lambda: False)
        result = tracker.check_progress(Coord(5.6000, -0.1870))
        assert result.status == RouteStatus.ON_ROUTE
        assert result.recalculate is False

    def test_stop(self) -> None:
        tracker = _loaded_tracker()
        tracker.stop()
        assert tracker.check_progress(A).status == RouteStatus.INACTIVE

    def test_finishes_at_vertex_next_to_destination(self) -> None:
        end = Coord(5.60531, -0.18539)
        tracker = RouteTracker(NavConfig())
        tracker.load_route([*ROUTE, end], [_step(C, "Head north"), _step(E, "Turn right")])

        assert tracker.check_progress(B).status == RouteStatus.ON_ROUTE
        assert tracker.check_progress(D).status == RouteStatus.ON_ROUTE

        result = tracker.check_progress(E)
        assert result.status == RouteStatus.FINISHED
        assert tracker.polyline == [E, end]

    def test_loop_route_does_not_finish_at_start(self) -> None:
        back_home = Coord(5.60371, -0.18701)
        tracker = RouteTracker(NavConfig())
        tracker.load_route([A, B, C, back_home], [_step(C), _step(back_home)])

        result = tracker.check_progress(A)
        assert result.status == RouteStatus.ON_ROUTE
        assert tracker.is_active is True
