# nav_logger.py
# Handles all file I/O for the tracking system.
# Saves routes and navigation events as JSON.

import json
import os
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from .models import Coord, ProgressResult, RouteStep
from .nav_config import NavConfig

# Configured once at the entry point (see main.py)
logger = logging.getLogger(__name__)


class NavLogger:
    """
    Persists the active route and per-update tracking events to JSON files.

    Args:
        config: NavConfig instance for file paths and directories.
    """

    def __init__(self, config: Optional[NavConfig] = None) -> None:
        self.config = config or NavConfig()
        os.makedirs(self.config.log_dir, exist_ok=True)

    # ------------------------------------------------------------------
    # Route persistence
    # ------------------------------------------------------------------

    def save_route(self, steps: List[RouteStep], polyline: List[Coord]) -> bool:
        """
        Serialize the remaining route to JSON.

        Args:
            steps:    Remaining RouteStep objects.
            polyline: Remaining route polyline.  Stored as plain points, not
                      encoded, so precise GPS ends survive unrounded.

        Returns:
            True on success, False on failure.
        """
        filepath = self.config.route_filepath
        try:
            data = {
                "saved_at": datetime.now().isoformat(),
                "step_count": len(steps),
                "steps": [s.to_dict() for s in steps],
                "polyline": [p.to_dict() for p in polyline],
            }
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            logger.info(f"Route saved to {filepath} ({len(steps)} steps, {len(polyline)} points).")
            return True
        except IOError as e:
            logger.error(f"Failed to save route to {filepath}: {e}")
            return False

    def load_route(
        self, filepath: Optional[str] = None
    ) -> Optional[Tuple[List[RouteStep], List[Coord]]]:
        """
        Load a previously saved route from JSON.

        Args:
            filepath: Path override; uses config default if omitted.

        Returns:
            (steps, polyline), or None if loading failed.
        """
        path = filepath or self.config.route_filepath
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            steps = [RouteStep.from_dict(s) for s in data["steps"]]
            polyline = [Coord.from_dict(p) for p in data.get("polyline", [])]
            logger.info(f"Route loaded from {path} ({len(steps)} steps).")
            return steps, polyline
        except (IOError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to load route from {path}: {e}")
            return None

    # ------------------------------------------------------------------
    # Session event logging
    # ------------------------------------------------------------------

    def log_event(self, result: ProgressResult, position: Coord) -> None:
        """
        Append a single tracking event to the session log file.

        Args:
            result:   ProgressResult from RouteTracker.
            position: Position the result was computed for.
        """
        entry = {
            "timestamp": datetime.now().isoformat(),
            "lat": position.lat,
            "lon": position.lon,
            "status": result.status.value,
            "message": result.message,
            "recalculate": result.recalculate,
            "distance_to_step_km": result.distance_to_step_km,
            "remaining_points": result.remaining_points,
        }
        try:
            with open(self.config.session_filepath, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except IOError as e:
            logger.error(f"Failed to write event log: {e}")
