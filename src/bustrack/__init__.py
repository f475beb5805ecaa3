"""BusTrack - Real-time OC Transpo departure boards from GTFS-Realtime TripUpdates."""

__version__ = "0.1.0"

from .config import Config
from .departure_tracker import DepartureTracker
from .errors import DecodingError, GTFSError, InvalidResponse, InvalidURL, NoDataForStop
from .feed_client import FeedClient
from .models import Departure, FeedMessage, adjust_departures
from .static_index import StaticIndexStore

__all__ = [
    "DepartureTracker",
    "FeedClient",
    "StaticIndexStore",
    "Config",
    "Departure",
    "FeedMessage",
    "adjust_departures",
    "GTFSError",
    "InvalidURL",
    "InvalidResponse",
    "DecodingError",
    "NoDataForStop",
]
