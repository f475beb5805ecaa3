"""Route display names, direction fallbacks and route filtering."""

from typing import Dict, List, Optional

# Display names by full route id. Unlisted routes show the raw id.
ROUTE_NAMES: Dict[str, str] = {
    "7-288": "7 Carleton",
    "94-28": "Route 94",
    "88-1": "Route 88",
}

# Most common static headsign per route number and direction id.
# Only used when neither the feed nor the static trips give a destination.
ROUTE_DIRECTIONS: Dict[str, Dict[int, str]] = {
    "6": {0: "Greenboro", 1: "Rockcliffe"},
    "7": {0: "Carleton", 1: "St. Laurent"},
    "12": {0: "Blair", 1: "Tunney's Pasture"},
    "14": {0: "Carlington", 1: "Riverview"},
    "16": {0: "Britannia", 1: "Greenboro"},
    "19": {0: "Parliament", 1: "Hurdman"},
    "61": {0: "Terry Fox", 1: "Innovation"},
    "75": {0: "Barrhaven Centre", 1: "Cambrian"},
    "85": {0: "Bayshore", 1: "Gatineau"},
    "88": {0: "Terry Fox", 1: "Hurdman"},
    "95": {0: "Barrhaven", 1: "Orleans"},
    "97": {0: "Bayshore", 1: "Airport"},
}

GENERIC_DESTINATION = "Destination"


def route_number(route_id: str) -> str:
    """Route family of a route id: "7-288" -> "7"."""
    return route_id.split("-", 1)[0]


def route_name(route_id: str) -> str:
    return ROUTE_NAMES.get(route_id, route_id)


def direction_fallback(number: str, direction_id: Optional[int]) -> str:
    """Manual destination for a route number and direction, or "Destination"."""
    if direction_id is None:
        return GENERIC_DESTINATION
    return ROUTE_DIRECTIONS.get(number, {}).get(direction_id, GENERIC_DESTINATION)


def matches_route_filter(route_id: str, route_filter: Optional[List[str]]) -> bool:
    """
    Check a route id against an allow-list.

    An entry admits the exact route id, any variant of it ("7" admits
    "7-288") and any route id whose route number equals the entry. An empty
    or missing filter admits everything.
    """
    if not route_filter:
        return True

    number = route_number(route_id)
    for allowed in route_filter:
        if route_id == allowed or route_id.startswith(allowed + "-") or number == allowed:
            return True
    return False
