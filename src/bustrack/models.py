"""Data models for the BusTrack departure resolver."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .config import OFFLINE_FLOOR_MINUTES


@dataclass
class FeedHeader:
    """Header of a GTFS-Realtime feed message."""
    gtfs_realtime_version: str = "2.0"
    timestamp: int = 0


@dataclass
class TimeUpdate:
    """Predicted arrival or departure at a stop."""
    time: Optional[int] = None  # Unix timestamp
    delay: Optional[int] = None  # Seconds


@dataclass
class StopTimeUpdate:
    """Real-time update for one stop of a trip."""
    stop_id: str
    stop_sequence: Optional[int] = None
    arrival: Optional[TimeUpdate] = None
    departure: Optional[TimeUpdate] = None


@dataclass
class TripDescriptor:
    """Identifies the trip a TripUpdate refers to."""
    route_id: str
    trip_id: Optional[str] = None
    direction_id: Optional[int] = None  # 0 or 1
    start_time: Optional[str] = None  # HH:MM:SS
    start_date: Optional[str] = None  # YYYYMMDD
    trip_headsign: Optional[str] = None  # Live destination, when the feed has one


@dataclass
class TripUpdate:
    """Real-time progress of a single trip."""
    trip: TripDescriptor
    stop_time_updates: List[StopTimeUpdate] = field(default_factory=list)


@dataclass
class FeedEntity:
    """One entity of a feed message."""
    id: str
    trip_update: Optional[TripUpdate] = None
    is_deleted: bool = False

    @property
    def active_trip_update(self) -> Optional[TripUpdate]:
        """Trip update of the entity, or None when the entity is deleted."""
        if self.is_deleted:
            return None
        return self.trip_update


@dataclass
class FeedMessage:
    """Decoded GTFS-Realtime TripUpdates feed."""
    header: FeedHeader = field(default_factory=FeedHeader)
    entities: List[FeedEntity] = field(default_factory=list)


@dataclass(frozen=True)
class StaticTripEntry:
    """Static schedule data for a trip id."""
    headsign: Optional[str] = None
    direction_id: Optional[int] = None


@dataclass(frozen=True)
class TripStartCandidate:
    """A static trip sharing a route, service and start time."""
    trip_id: str
    last_stop_id: str


@dataclass(frozen=True)
class Departure:
    """An upcoming departure from a stop, ready for display."""
    id: str  # Feed entity id
    route_number: str
    route_name: str
    destination: str
    minutes_until_arrival: int
    is_arriving_now: bool
    direction_id: Optional[int] = None  # 0 = "to", 1 = "from"
    stop_id: Optional[str] = None
    stop_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the cache field names."""
        return {
            "id": self.id,
            "routeNumber": self.route_number,
            "routeName": self.route_name,
            "destination": self.destination,
            "minutesUntilArrival": self.minutes_until_arrival,
            "isArrivingNow": self.is_arriving_now,
            "directionId": self.direction_id,
            "stopId": self.stop_id,
            "stopName": self.stop_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Departure":
        """Rebuild a departure written by to_dict()."""
        return cls(
            id=data["id"],
            route_number=data["routeNumber"],
            route_name=data["routeName"],
            destination=data["destination"],
            minutes_until_arrival=int(data["minutesUntilArrival"]),
            is_arriving_now=bool(data["isArrivingNow"]),
            direction_id=data.get("directionId"),
            stop_id=data.get("stopId"),
            stop_name=data.get("stopName"),
        )

    def adjusted(self, elapsed_minutes: int) -> "Departure":
        """Return a copy aged by elapsed_minutes."""
        minutes = self.minutes_until_arrival - elapsed_minutes
        return replace(self, minutes_until_arrival=minutes, is_arriving_now=minutes <= 0)


def adjust_departures(departures: List[Departure], elapsed_minutes: int) -> List[Departure]:
    """
    Age cached departures and drop the ones that have left.

    Departures up to two minutes past are kept so "arriving now" can linger
    on an offline display.

    Args:
        departures: Departures as they were when cached.
        elapsed_minutes: Whole minutes since they were cached.

    Returns:
        New Departure objects; the input list is not modified.
    """
    adjusted = [departure.adjusted(elapsed_minutes) for departure in departures]
    return [d for d in adjusted if d.minutes_until_arrival >= OFFLINE_FLOOR_MINUTES]
