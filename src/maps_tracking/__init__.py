"""Route tracking helpers for client-side navigation.

Great-circle distances, heading normalization, encoded polyline decoding,
route-deviation detection with polyline trimming and pruning of traversed
route steps.
"""

from .geo_utils import (
    convert_to_km,
    degrees_to_radians,
    distance_from_fix_km,
    distance_km,
    format_km,
    normalize_heading,
    rounded_distance_km,
)
from .models import (
    Coord,
    DeviationResult,
    DirectionsResponseError,
    LocationFix,
    Maneuver,
    ProgressResult,
    Quantity,
    RouteStatus,
    RouteStep,
    TravelMode,
    parse_directions,
)
from .nav_config import NavConfig
from .navigator import NavigationSystem
from .polyline_codec import (
    PolylineDecodeError,
    decode_polyline,
    encode_polyline,
    iter_polyline,
    route_polyline,
    with_precise_ends,
)
from .route_tracker import (
    RouteTracker,
    check_route,
    distance_to_step_end,
    prune_completed_steps,
)

__version__ = "0.1.0"
