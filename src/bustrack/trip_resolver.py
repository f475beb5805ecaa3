"""Resolution of real-time trips to static GTFS trip ids."""

import logging
from typing import Optional

from .static_index import StaticIndexStore

logger = logging.getLogger(__name__)


class TripIdentityResolver:
    """
    Maps a real-time trip descriptor to a static trip id.

    The feed's trip ids do not match the static schedule, so trips are found
    through the service ids running on the start date and the trip start index
    (route + service + start time).
    """

    def __init__(self, static_store: StaticIndexStore):
        self.static_store = static_store

    def resolve(
        self,
        route_id: str,
        start_date: Optional[str],
        start_time: Optional[str],
        last_stop_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Find the static trip id for a real-time trip.

        Args:
            route_id: Route id from the feed (e.g. "19-1").
            start_date: Trip start date, YYYYMMDD.
            start_time: Trip start time, HH:MM:SS.
            last_stop_id: Final stop of the trip in the feed, used to pick
                between trips that share a start time.

        Returns:
            Static trip id, or None if the trip cannot be resolved.
        """
        if not start_date or not start_time:
            return None

        service_ids = self.static_store.service_ids(start_date)
        if not service_ids:
            logger.debug(f"No service ids for {start_date}")
            return None

        for service_id in service_ids:
            candidates = self.static_store.trip_candidates(route_id, service_id, start_time)
            if not candidates:
                continue

            if len(candidates) == 1:
                return candidates[0].trip_id

            for candidate in candidates:
                if last_stop_id is not None and candidate.last_stop_id == last_stop_id:
                    return candidate.trip_id

            # Ambiguous start time with no last stop match: keep index order
            logger.debug(
                f"{len(candidates)} trips for {route_id} at {start_time} on {service_id}, "
                f"none ending at {last_stop_id}; using {candidates[0].trip_id}"
            )
            return candidates[0].trip_id

        return None
