# nav_config.py
# All tuneable constants in one place.
# Pass a NavConfig instance to every module that needs settings.

import os
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Tracking constants
# ---------------------------------------------------------------------------

DEVIATION_THRESHOLD_KM: float = 0.05   # 50 m of GPS noise before re-routing
DISTANCE_DECIMALS: int = 2             # km values are compared at this precision
STEP_MATCH_DECIMALS: int = 5           # step end vs. polyline vertex matching
POLYLINE_PRECISION: int = 5            # Google encoded polyline (1e5)


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class NavConfig:
    # Deviation detection
    deviation_threshold_km: float = DEVIATION_THRESHOLD_KM
    arrival_threshold_km: float = DEVIATION_THRESHOLD_KM   # last point → finished

    # Polyline / step matching
    step_match_decimals: int = STEP_MATCH_DECIMALS
    polyline_precision: int = POLYLINE_PRECISION

    # Logging
    log_dir: str = "."                     # directory for saved JSON files
    route_filename: str = "active_route.json"
    session_filename: str = "nav_session.jsonl"

    @property
    def route_filepath(self) -> str:
        return os.path.join(self.log_dir, self.route_filename)

    @property
    def session_filepath(self) -> str:
        return os.path.join(self.log_dir, self.session_filename)
