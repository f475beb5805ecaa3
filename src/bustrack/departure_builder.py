"""Construction of Departure records from matched stop time updates."""

from typing import Optional

from .config import MAX_MINUTES, MIN_MINUTES
from .models import Departure, StopTimeUpdate
from .routes import route_name, route_number


def select_timestamp(update: StopTimeUpdate) -> Optional[int]:
    """Arrival time if positive, else departure time if positive, else None."""
    timestamp = update.arrival.time if update.arrival else None
    if not timestamp or timestamp <= 0:
        timestamp = update.departure.time if update.departure else None
    if not timestamp or timestamp <= 0:
        return None
    return timestamp


def minutes_until(timestamp: float, now: float) -> int:
    """Whole minutes from now until timestamp, truncated toward zero."""
    return int((timestamp - now) / 60)


def in_window(minutes: int) -> bool:
    """Keep departures up to 5 minutes past and 2 hours ahead."""
    return MIN_MINUTES <= minutes <= MAX_MINUTES


def build_departure(
    entity_id: str,
    route_id: str,
    destination: str,
    minutes: int,
    direction_id: Optional[int],
    stop_id: str,
    stop_name: Optional[str] = None,
) -> Departure:
    """
    Build the Departure shown for a trip at a stop.

    Args:
        entity_id: Feed entity id of the trip update.
        route_id: Full route id from the feed (e.g. "7-288").
        destination: Resolved destination label.
        minutes: Raw minutes until arrival, possibly negative.
        direction_id: Direction after static resolution.
        stop_id: Stop the departure was requested for.
        stop_name: Display name of the stop, if known.

    Returns:
        Departure with minutes clamped at zero.
    """
    return Departure(
        id=entity_id,
        route_number=route_number(route_id),
        route_name=route_name(route_id),
        destination=destination,
        minutes_until_arrival=max(0, minutes),
        is_arriving_now=minutes <= 0,
        direction_id=direction_id,
        stop_id=stop_id,
        stop_name=stop_name,
    )
