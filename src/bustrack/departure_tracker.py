"""Main BusTrack departure tracker."""

import logging
import time
from typing import Dict, Iterable, List, Optional

from .config import MAX_DEPARTURES, Config
from .departure_builder import build_departure, in_window, minutes_until, select_timestamp
from .destination import DestinationResolver
from .errors import NoDataForStop
from .feed_client import FeedClient
from .models import Departure, FeedMessage
from .routes import matches_route_filter
from .static_index import StaticIndexStore
from .stop_matcher import find_matching_update

logger = logging.getLogger(__name__)


class DepartureTracker:
    """
    Tracks upcoming bus departures for OC Transpo stops.

    This class provides methods to:
    - Fetch the TripUpdates feed once and resolve departures for many stops
    - Get departures for a single stop
    - Resolve departures from an already decoded feed
    """

    def __init__(
        self,
        client: Optional[FeedClient] = None,
        static_store: Optional[StaticIndexStore] = None,
        config: Optional[Config] = None,
    ):
        """
        Initialize the tracker.

        Args:
            client: Feed client. Built from config when omitted.
            static_store: Static indexes. Built from config.data_dir when omitted.
            config: Settings used for the defaults above. Defaults to Config.from_env().
        """
        if config is None and (client is None or static_store is None):
            config = Config.from_env()
        self.client = client or FeedClient(config)
        self.static_store = static_store or StaticIndexStore(config.data_dir)
        self.destination_resolver = DestinationResolver(self.static_store)

    def resolve_all(
        self, stop_ids: Iterable[str], route_filter: Optional[List[str]] = None
    ) -> Dict[str, List[Departure]]:
        """
        Get departures for several stops from a single feed download.

        Args:
            stop_ids: Stops to resolve.
            route_filter: Optional allow-list of route ids or route numbers.

        Returns:
            Dictionary of stop id to at most five departures, soonest first.
            Stops without departures map to an empty list.

        Raises:
            InvalidURL, InvalidResponse, DecodingError: If the feed cannot be
                fetched or decoded. No partial results are returned.
        """
        feed = self.client.fetch_feed()
        stop_ids = list(dict.fromkeys(stop_ids))
        logger.info(f"Decoded {len(feed.entities)} entities. Processing for {len(stop_ids)} stops...")

        now = time.time()
        return {
            stop_id: self.process_feed(feed, stop_id, route_filter=route_filter, now=now)
            for stop_id in stop_ids
        }

    def get_departures(self, stop_id: str, route_filter: Optional[List[str]] = None) -> List[Departure]:
        """
        Get departures for one stop.

        Raises:
            NoDataForStop: If the feed has no departures for the stop.
        """
        departures = self.resolve_all([stop_id], route_filter=route_filter)[stop_id]
        if not departures:
            raise NoDataForStop(stop_id)
        return departures

    def process_feed(
        self,
        feed: FeedMessage,
        stop_id: str,
        route_filter: Optional[List[str]] = None,
        now: Optional[float] = None,
    ) -> List[Departure]:
        """
        Resolve departures for a stop from a decoded feed.

        Args:
            feed: Decoded TripUpdates feed.
            stop_id: Stop to resolve.
            route_filter: Optional allow-list of route ids or route numbers.
            now: Current Unix time. Defaults to time.time().

        Returns:
            At most five departures sorted by minutes until arrival.
        """
        if now is None:
            now = time.time()

        stop_name = self.static_store.stop_name(stop_id)
        departures: List[Departure] = []
        match_count = 0

        for entity in feed.entities:
            trip_update = entity.active_trip_update
            if trip_update is None:
                continue

            route_id = trip_update.trip.route_id
            if not matches_route_filter(route_id, route_filter):
                continue

            update = find_matching_update(stop_id, trip_update.stop_time_updates)
            if update is None:
                continue
            match_count += 1

            timestamp = select_timestamp(update)
            if timestamp is None:
                logger.debug(f"No valid timestamp for stop {stop_id} in entity {entity.id}")
                continue

            minutes = minutes_until(timestamp, now)
            if not in_window(minutes):
                continue

            resolved = self.destination_resolver.resolve(trip_update, stop_id)
            departures.append(
                build_departure(
                    entity_id=entity.id,
                    route_id=route_id,
                    destination=resolved.destination,
                    minutes=minutes,
                    direction_id=resolved.direction_id,
                    stop_id=stop_id,
                    stop_name=stop_name,
                )
            )

        logger.debug(
            f"Stop {stop_id}: processed {len(feed.entities)} entities, "
            f"found {match_count} matches, {len(departures)} departures"
        )
        if not departures:
            logger.warning(f"No departures found for stop {stop_id}")

        # sorted() is stable, so equal times keep feed order
        departures = sorted(departures, key=lambda d: d.minutes_until_arrival)
        return departures[:MAX_DEPARTURES]
