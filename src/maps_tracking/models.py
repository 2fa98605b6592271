# models.py
# Shared data structures and enums used across all modules.

import html
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")


class DirectionsResponseError(ValueError):
    """Raised when a directions response carries no usable route."""


# ---------------------------------------------------------------------------
# Coordinate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coord:
    """Immutable geographic coordinate in decimal degrees."""
    lat: float
    lon: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lon}

    @staticmethod
    def from_dict(d: dict) -> "Coord":
        return Coord(float(d["lat"]), float(d["lng"]))


@dataclass
class LocationFix:
    """
    A reading from the location provider.

    Any field may be missing while the provider is still warming up.
    """
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    heading: Optional[float] = None
    accuracy_m: Optional[float] = None

    def to_coord(self) -> Coord:
        # Unknown position collapses to (0, 0); check has_position first.
        lat = self.latitude if self.latitude is not None else 0.0
        lon = self.longitude if self.longitude is not None else 0.0
        return Coord(lat, lon)

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None


# ---------------------------------------------------------------------------
# Route step
# ---------------------------------------------------------------------------

class TravelMode(Enum):
    DRIVING   = "DRIVING"
    WALKING   = "WALKING"
    BICYCLING = "BICYCLING"
    TRANSIT   = "TRANSIT"


class Maneuver(Enum):
    TURN_LEFT         = "turn-left"
    TURN_RIGHT        = "turn-right"
    TURN_SLIGHT_LEFT  = "turn-slight-left"
    TURN_SLIGHT_RIGHT = "turn-slight-right"
    TURN_SHARP_LEFT   = "turn-sharp-left"
    TURN_SHARP_RIGHT  = "turn-sharp-right"
    UTURN_LEFT        = "uturn-left"
    UTURN_RIGHT       = "uturn-right"
    STRAIGHT          = "straight"
    RAMP_LEFT         = "ramp-left"
    RAMP_RIGHT        = "ramp-right"
    MERGE             = "merge"
    FORK_LEFT         = "fork-left"
    FORK_RIGHT        = "fork-right"
    FERRY             = "ferry"
    FERRY_TRAIN       = "ferry-train"
    ROUNDABOUT_LEFT   = "roundabout-left"
    ROUNDABOUT_RIGHT  = "roundabout-right"
    KEEP_LEFT         = "keep-left"
    KEEP_RIGHT        = "keep-right"


def _enum_or_none(enum_cls, value: Optional[str]):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug(f"Unknown {enum_cls.__name__} value: {value!r}")
        return None


@dataclass
class Quantity:
    """Distance (metres) or duration (seconds) with its display text."""
    text: Optional[str] = None
    value: Optional[int] = None

    def to_dict(self) -> dict:
        return {"text": self.text, "value": self.value}

    @staticmethod
    def from_dict(d: Optional[dict]) -> Optional["Quantity"]:
        if d is None:
            return None
        return Quantity(text=d.get("text"), value=d.get("value"))


@dataclass
class RouteStep:
    """One instructed leg of a route, as returned by a directions API."""
    distance: Optional[Quantity] = None
    duration: Optional[Quantity] = None
    start_location: Optional[Coord] = None
    end_location: Optional[Coord] = None
    html_instructions: Optional[str] = None
    encoded_polyline: Optional[str] = None
    travel_mode: Optional[TravelMode] = None
    maneuver: Optional[Maneuver] = None

    @property
    def distance_meters(self) -> Optional[int]:
        return self.distance.value if self.distance else None

    @property
    def distance_text(self) -> Optional[str]:
        return self.distance.text if self.distance else None

    @property
    def duration_seconds(self) -> Optional[int]:
        return self.duration.value if self.duration else None

    @property
    def duration_text(self) -> Optional[str]:
        return self.duration.text if self.duration else None

    @property
    def instructions(self) -> Optional[str]:
        """Instructions with HTML tags stripped, e.g. for text-to-speech."""
        if self.html_instructions is None:
            return None
        text = _TAG_RE.sub(" ", self.html_instructions)
        return " ".join(html.unescape(text).split())

    def to_dict(self) -> dict:
        return {
            "distance": self.distance.to_dict() if self.distance else None,
            "duration": self.duration.to_dict() if self.duration else None,
            "start_location": self.start_location.to_dict() if self.start_location else None,
            "end_location": self.end_location.to_dict() if self.end_location else None,
            "html_instructions": self.html_instructions,
            "polyline": {"points": self.encoded_polyline} if self.encoded_polyline is not None else None,
            "travel_mode": self.travel_mode.value if self.travel_mode else None,
            "maneuver": self.maneuver.value if self.maneuver else None,
        }

    @staticmethod
    def from_dict(d: dict) -> "RouteStep":
        start = d.get("start_location")
        end = d.get("end_location")
        poly = d.get("polyline") or {}
        return RouteStep(
            distance=Quantity.from_dict(d.get("distance")),
            duration=Quantity.from_dict(d.get("duration")),
            start_location=Coord.from_dict(start) if start else None,
            end_location=Coord.from_dict(end) if end else None,
            html_instructions=d.get("html_instructions"),
            encoded_polyline=poly.get("points"),
            travel_mode=_enum_or_none(TravelMode, d.get("travel_mode")),
            maneuver=_enum_or_none(Maneuver, d.get("maneuver")),
        )


@dataclass
class DirectionsRoute:
    """Steps and overview geometry of the first route in a response."""
    steps: List[RouteStep] = field(default_factory=list)
    overview_polyline: Optional[str] = None


def parse_directions(response: dict) -> DirectionsRoute:
    """
    Read the first route of a Directions API JSON response.

    Args:
        response: Decoded JSON body.

    Returns:
        DirectionsRoute with the steps of every leg, in order.

    Raises:
        DirectionsResponseError: If the status is not OK or no route exists.
    """
    status = response.get("status", "OK")
    if status != "OK":
        raise DirectionsResponseError(f"Directions request failed with status {status}.")

    routes = response.get("routes") or []
    if not routes:
        raise DirectionsResponseError("Directions response contains no routes.")

    route = routes[0]
    steps = [
        RouteStep.from_dict(s)
        for leg in route.get("legs", [])
        for s in leg.get("steps", [])
    ]
    overview = (route.get("overview_polyline") or {}).get("points")
    return DirectionsRoute(steps=steps, overview_polyline=overview)


# ---------------------------------------------------------------------------
# Tracking results
# ---------------------------------------------------------------------------

@dataclass
class DeviationResult:
    """Outcome of one deviation check."""
    recalculate: bool
    polyline: List[Coord]


class RouteStatus(Enum):
    INACTIVE  = "inactive"
    ON_ROUTE  = "on_route"
    OFF_ROUTE = "off_route"
    FINISHED  = "finished"


@dataclass
class ProgressResult:
    """Returned by RouteTracker.check_progress() every position update."""
    status: RouteStatus
    message: str
    recalculate: bool = False
    distance_to_step_km: Optional[float] = None
    current_step: Optional[RouteStep] = None
    remaining_points: int = 0
