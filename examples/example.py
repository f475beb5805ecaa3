"""Example usage of DepartureTracker."""

import logging
import sys
from pathlib import Path

# Add src to path so we can import bustrack
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bustrack.departure_tracker import DepartureTracker
from bustrack.errors import DecodingError, InvalidResponse, InvalidURL

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def print_departures(stop_ids, route_filter=None):
    """
    Fetch and display upcoming departures for one or more stops.

    Args:
        stop_ids: Stop codes (e.g. ["8922", "5813"])
        route_filter: Optional route numbers to show (e.g. ["7", "88"])
    """
    tracker = DepartureTracker()

    try:
        results = tracker.resolve_all(stop_ids, route_filter=route_filter)
    except InvalidURL as e:
        print(f"Configuration error: {e}")
        sys.exit(2)
    except (InvalidResponse, DecodingError) as e:
        # Distinct from "no departures": the feed itself is unavailable
        print(f"Could not load live departures: {e}")
        sys.exit(1)

    for stop_id in stop_ids:
        departures = results.get(stop_id, [])
        stop_name = departures[0].stop_name if departures and departures[0].stop_name else ""

        print(f"\n{'='*70}")
        print(f"Stop {stop_id} {stop_name}".rstrip())
        print(f"{'='*70}")

        if not departures:
            print("  No upcoming departures")
            continue

        for departure in departures:
            when = "Now" if departure.is_arriving_now else f"{departure.minutes_until_arrival:3d} min"
            print(f"  {departure.route_number:>4}  {departure.destination:<30} {when}")

    print()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python example.py STOP_ID [STOP_ID ...] [--routes 7,88]")
        sys.exit(1)

    args = sys.argv[1:]
    routes = None
    if "--routes" in args:
        index = args.index("--routes")
        routes = [r for r in args[index + 1].split(",") if r] if index + 1 < len(args) else None
        args = args[:index] + args[index + 2:]

    print_departures(args, route_filter=routes)
