"""Destination labels for departures."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .models import TripUpdate
from .routes import GENERIC_DESTINATION, direction_fallback, route_number
from .stop_matcher import last_stop_id
from .static_index import StaticIndexStore
from .trip_resolver import TripIdentityResolver

logger = logging.getLogger(__name__)

BILINGUAL_SEPARATOR = "~"

# Stop name that shows up as a headsign on some trips
BAD_HEADSIGN_FRAGMENT = "GARRY J ARMSTRONG"
BAD_HEADSIGN_REPLACEMENT = "St-Laurent"

SHORTENED_HEADSIGNS = {
    "rideau centre": "Rideau",
}


@dataclass
class ResolvedDestination:
    """Destination label plus the direction id it was resolved with."""
    destination: str
    direction_id: Optional[int]


@dataclass
class _Lookup:
    trip_update: TripUpdate
    stop_id: str
    route_number: str
    direction_id: Optional[int]


def normalize_bilingual(destination: Optional[str]) -> Optional[str]:
    """
    Keep the English half of a bilingual headsign.

    "Parliament ~ Parlement" -> "Parliament". Returns None when nothing is
    left before the separator.
    """
    if destination is None or BILINGUAL_SEPARATOR not in destination:
        return destination
    cleaned = destination.split(BILINGUAL_SEPARATOR, 1)[0].strip()
    return cleaned or None


def cardinal_fallback(direction_id: Optional[int]) -> str:
    """Last-resort label; not checked against the route's geography."""
    return "Eastbound" if direction_id == 0 else "Westbound"


def sanitize_destination(destination: str) -> str:
    """Replace headsigns known to be wrong or too long."""
    if BAD_HEADSIGN_FRAGMENT in destination.upper():
        return BAD_HEADSIGN_REPLACEMENT
    return SHORTENED_HEADSIGNS.get(destination.lower(), destination)


class DestinationResolver:
    """
    Works out the destination shown for a departure.

    Headsign sources are tried in order and the first non-empty one wins:
    the live headsign from the feed, then the headsign of the matching static
    trip (with its per-stop override). Without a headsign the manual
    route/direction table is used, then a cardinal direction.
    """

    def __init__(self, static_store: StaticIndexStore, trip_resolver: Optional[TripIdentityResolver] = None):
        self.static_store = static_store
        self.trip_resolver = trip_resolver or TripIdentityResolver(static_store)
        self.headsign_sources: List[Callable[[_Lookup], Optional[str]]] = [
            self._realtime_headsign,
            self._static_headsign,
        ]

    def resolve(self, trip_update: TripUpdate, stop_id: str, number: Optional[str] = None) -> ResolvedDestination:
        """
        Resolve the destination of a trip at a stop.

        Args:
            trip_update: Trip serving the stop.
            stop_id: Stop the departure is for.
            number: Route number, derived from the route id when omitted.

        Returns:
            ResolvedDestination with a non-empty label. Its direction id is the
            static trip's when one was resolved, else the feed's.
        """
        lookup = _Lookup(
            trip_update=trip_update,
            stop_id=stop_id,
            route_number=number if number is not None else route_number(trip_update.trip.route_id),
            direction_id=trip_update.trip.direction_id,
        )

        destination = None
        for source in self.headsign_sources:
            destination = source(lookup)
            if destination:
                break

        destination = normalize_bilingual(destination)

        if not destination:
            destination = direction_fallback(lookup.route_number, lookup.direction_id)

        if not destination or destination == GENERIC_DESTINATION:
            destination = cardinal_fallback(lookup.direction_id)

        return ResolvedDestination(
            destination=sanitize_destination(destination),
            direction_id=lookup.direction_id,
        )

    @staticmethod
    def _realtime_headsign(lookup: _Lookup) -> Optional[str]:
        headsign = lookup.trip_update.trip.trip_headsign
        if headsign is None:
            return None
        return headsign.strip() or None

    def _static_headsign(self, lookup: _Lookup) -> Optional[str]:
        trip = lookup.trip_update.trip
        trip_id = self.trip_resolver.resolve(
            route_id=trip.route_id,
            start_date=trip.start_date,
            start_time=trip.start_time,
            last_stop_id=last_stop_id(lookup.trip_update.stop_time_updates),
        )
        if trip_id is None:
            return None

        static_trip = self.static_store.static_trip(trip_id)
        if static_trip is None:
            logger.debug(f"Resolved trip {trip_id} is not in the static trip map")
            return None

        if static_trip.direction_id is not None:
            lookup.direction_id = static_trip.direction_id

        headsign = None
        if static_trip.headsign and static_trip.headsign.strip():
            headsign = static_trip.headsign.strip()

        # Destination can change partway along a trip
        override = self.static_store.stop_headsign_override(trip_id, lookup.stop_id)
        if override and override.strip():
            headsign = override.strip()

        return headsign
