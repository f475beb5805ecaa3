"""Precomputed GTFS static lookup tables."""

import json
import logging
import os
from typing import Any, Callable, Dict, List, Optional

from .models import StaticTripEntry, TripStartCandidate

logger = logging.getLogger(__name__)

SERVICES_BY_DATE_FILE = "services_by_date.json"
TRIP_START_INDEX_FILE = "trip_start_index.json"
STOP_HEADSIGN_OVERRIDES_FILE = "stop_headsign_overrides.json"
TRIP_ID_MAP_FILE = "trip_id_map.json"
STOPS_GEOJSON_FILE = "stops.geojson"


def trip_start_key(route_id: str, service_id: str, start_time: str) -> str:
    """Key of the trip start index: "routeId|serviceId|startTime"."""
    return f"{route_id}|{service_id}|{start_time}"


def stop_headsign_key(trip_id: str, stop_id: str) -> str:
    """Key of the stop headsign overrides: "tripId|stopId"."""
    return f"{trip_id}|{stop_id}"


class LazyTable:
    """
    A lookup table read from one JSON resource on first access.

    The resource is read at most once. If it is missing or malformed the
    failure is logged and the table stays empty for the life of the process.
    """

    def __init__(self, name: str, path: str, parse: Callable[[Any], Dict[str, Any]]):
        self.name = name
        self.path = path
        self._parse = parse
        self._data: Dict[str, Any] = {}
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self, key: str) -> Any:
        return self.data.get(key)

    @property
    def data(self) -> Dict[str, Any]:
        if not self._loaded:
            self._load()
        return self._data

    def __len__(self) -> int:
        return len(self.data)

    def _load(self) -> None:
        data: Dict[str, Any] = {}
        if not os.path.exists(self.path):
            logger.warning(f"{self.name}: {self.path} not found")
        else:
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = self._parse(json.load(f))
                logger.info(f"{self.name}: Loaded {len(data)} entries from {self.path}")
            except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
                logger.error(f"{self.name}: Failed to decode {self.path}: {e}")
                data = {}

        # Publish the finished table before flagging it
        self._data = data
        self._loaded = True


def _expect_str(value: Any, context: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{context} is not a string")
    return value


def _optional_headsign(value: Any, context: str) -> Optional[str]:
    if value is None:
        return None
    return _expect_str(value, context)


def _parse_services_by_date(document: Any) -> Dict[str, List[str]]:
    services: Dict[str, List[str]] = {}
    for date, service_ids in document.items():
        if not isinstance(service_ids, list):
            raise TypeError(f"services for {date} are not a list")
        services[date] = [_expect_str(s, f"service id for {date}") for s in service_ids]
    return services


def _parse_trip_start_index(document: Any) -> Dict[str, List[TripStartCandidate]]:
    index: Dict[str, List[TripStartCandidate]] = {}
    for key, candidates in document.items():
        index[key] = [
            TripStartCandidate(
                trip_id=str(c["t"] if "t" in c else c["tripId"]),
                last_stop_id=str(c["l"] if "l" in c else c["lastStopId"]),
            )
            for c in candidates
        ]
    return index


def _parse_stop_headsign_overrides(document: Any) -> Dict[str, str]:
    return {
        key: _expect_str(value, f"override for {key}")
        for key, value in document.items()
        if value is not None
    }


def _parse_trip_id_map(document: Any) -> Dict[str, StaticTripEntry]:
    trips: Dict[str, StaticTripEntry] = {}
    for trip_id, entry in document.items():
        headsign = _optional_headsign(entry.get("h", entry.get("headsign")), f"headsign of {trip_id}")
        direction_id = entry.get("d", entry.get("directionId"))
        if isinstance(direction_id, bool):
            raise TypeError(f"direction of {trip_id} is not an integer")
        trips[trip_id] = StaticTripEntry(
            headsign=headsign,
            direction_id=int(direction_id) if direction_id is not None else None,
        )
    return trips


def _parse_stops_geojson(document: Any) -> Dict[str, str]:
    # F560 is the stop code column of the city's open data export
    names: Dict[str, str] = {}
    for feature in document["features"]:
        properties = feature["properties"]
        names[str(properties["F560"])] = _expect_str(properties["Location"], "stop location")
    return names


class StaticIndexStore:
    """
    Read-only static schedule indexes, loaded lazily from a data directory.

    Tables are independent; each one is read on its first lookup and then
    kept for the life of the store.
    """

    def __init__(self, data_dir: str):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the precomputed JSON indexes.
        """
        self.data_dir = data_dir
        self.services_by_date = LazyTable(
            "ServiceByDate", os.path.join(data_dir, SERVICES_BY_DATE_FILE), _parse_services_by_date
        )
        self.trip_start_index = LazyTable(
            "TripStartIndex", os.path.join(data_dir, TRIP_START_INDEX_FILE), _parse_trip_start_index
        )
        self.stop_headsign_overrides = LazyTable(
            "StopHeadsignOverrides",
            os.path.join(data_dir, STOP_HEADSIGN_OVERRIDES_FILE),
            _parse_stop_headsign_overrides,
        )
        self.trip_id_map = LazyTable("TripIdMap", os.path.join(data_dir, TRIP_ID_MAP_FILE), _parse_trip_id_map)
        self.stop_names = LazyTable("StopNames", os.path.join(data_dir, STOPS_GEOJSON_FILE), _parse_stops_geojson)

    def service_ids(self, start_date: Optional[str]) -> List[str]:
        """Service ids running on a YYYYMMDD date, in index order."""
        if not start_date:
            return []
        return self.services_by_date.get(start_date) or []

    def trip_candidates(self, route_id: str, service_id: str, start_time: str) -> List[TripStartCandidate]:
        """Static trips of a route and service starting at start_time."""
        return self.trip_start_index.get(trip_start_key(route_id, service_id, start_time)) or []

    def stop_headsign_override(self, trip_id: str, stop_id: str) -> Optional[str]:
        """Headsign shown for a trip at one particular stop, if it differs."""
        return self.stop_headsign_overrides.get(stop_headsign_key(trip_id, stop_id))

    def static_trip(self, trip_id: str) -> Optional[StaticTripEntry]:
        return self.trip_id_map.get(trip_id)

    def stop_name(self, stop_id: str) -> Optional[str]:
        return self.stop_names.get(stop_id)
