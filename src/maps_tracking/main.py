# main.py
# Entry point: simulates a location loop feeding positions into NavigationSystem.
# In production, replace the test_locations loop with your real location source
# and the canned response with a real directions API call.
#
# Run with: python -m maps_tracking.main

import logging
import time

from .models import Coord, RouteStatus
from .nav_config import NavConfig
from .navigator import NavigationSystem
from .polyline_codec import encode_polyline

# ------------------------------------------------------------------
# Logging setup: configure once here, all modules inherit
# ------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

# ------------------------------------------------------------------
# Config: tweak thresholds or paths here, not inside the modules
# ------------------------------------------------------------------
config = NavConfig(
    deviation_threshold_km=0.05,
    log_dir="logs",
    route_filename="active_route.json",
)

# ------------------------------------------------------------------
# Simulated route (Accra, ~90 m between vertices)
# ------------------------------------------------------------------
ROUTE = [
    Coord(5.6037, -0.1870),    # Start
    Coord(5.6045, -0.1870),
    Coord(5.6053, -0.1870),    # Turn right
    Coord(5.6053, -0.1862),
    Coord(5.6053, -0.1854),    # Destination
]

DIRECTIONS = {
    "status": "OK",
    "routes": [{
        "legs": [{
            "steps": [
                {
                    "distance": {"text": "0.2 km", "value": 178},
                    "duration": {"text": "1 min", "value": 40},
                    "start_location": {"lat": 5.6037, "lng": -0.1870},
                    "end_location": {"lat": 5.6053, "lng": -0.1870},
                    "html_instructions": "Head <b>north</b> on Ring Road",
                    "polyline": {"points": encode_polyline(ROUTE[:3])},
                    "travel_mode": "DRIVING",
                },
                {
                    "distance": {"text": "0.2 km", "value": 177},
                    "duration": {"text": "1 min", "value": 45},
                    "start_location": {"lat": 5.6053, "lng": -0.1870},
                    "end_location": {"lat": 5.6053, "lng": -0.1854},
                    "html_instructions": "Turn <b>right</b> onto Oxford Street",
                    "polyline": {"points": encode_polyline(ROUTE[2:])},
                    "travel_mode": "DRIVING",
                    "maneuver": "turn-right",
                },
            ],
        }],
    }],
}

test_locations = [
    Coord(5.60371, -0.18701),   # At start
    Coord(5.60449, -0.18702),   # Heading north
    Coord(5.60529, -0.18699),   # At the turn
    Coord(5.60531, -0.18621),   # After the turn
    Coord(5.60532, -0.18541),   # Arrival
]


def main() -> None:
    # 1. Boot system
    nav = NavigationSystem(config=config)

    # 2. Load the route
    success, msg = nav.start_navigation(DIRECTIONS, precise_start=test_locations[0])
    if not success:
        print(f"[Main] Could not start navigation: {msg}")
        return

    print("\n--- Location Loop Active ---")

    # 3. Location loop: replace with a real location feed in production
    for position in test_locations:
        result = nav.update(position)

        print(f"  GPS {position} → [{result.status.name}] {result.message}")

        # React to status
        if result.status == RouteStatus.OFF_ROUTE:
            print("  ⚠  Off-route detected; request new directions here.")

        elif result.status == RouteStatus.FINISHED:
            print("  ✓  Destination reached. Navigation ended.")
            break

        # Simulate location poll interval (remove in real use)
        time.sleep(0.05)

    print("\n--- Session complete ---")
    print(f"    Log files written to: {config.log_dir}/")


if __name__ == "__main__":
    main()
