"""Decoders for GTFS-Realtime TripUpdates feeds."""

import json
import logging
from typing import Any, Dict, List, Optional

from .errors import DecodingError
from .models import (
    FeedEntity,
    FeedHeader,
    FeedMessage,
    StopTimeUpdate,
    TimeUpdate,
    TripDescriptor,
    TripUpdate,
)

logger = logging.getLogger(__name__)


def decode_feed(raw: bytes) -> FeedMessage:
    """
    Decode a JSON TripUpdates feed.

    The JSON comes from a protobuf-to-JSON conversion and uses PascalCase
    field names ("Header", "Entity", "TripUpdate", ...). Keys are matched
    exactly; the "Has*" presence fields the converter adds are ignored.

    Args:
        raw: Response body.

    Returns:
        Decoded FeedMessage.

    Raises:
        DecodingError: If the body is not valid JSON or an entity is missing
            a required field. No partially decoded feed is returned.
    """
    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise DecodingError(f"invalid JSON: {e}") from e

    if not isinstance(document, dict):
        raise DecodingError("feed root is not an object")

    header = _decode_header(document.get("Header"))
    entities = [_decode_entity(item) for item in document.get("Entity") or []]

    logger.debug(f"Decoded {len(entities)} entities (feed timestamp {header.timestamp})")
    return FeedMessage(header=header, entities=entities)


def decode_feed_protobuf(raw: bytes) -> FeedMessage:
    """
    Decode a binary GTFS-Realtime FeedMessage.

    Protobuf feeds carry no trip headsign, so destinations for them always
    come from static data.
    """
    from google.protobuf.message import DecodeError
    from google.transit import gtfs_realtime_pb2

    feed = gtfs_realtime_pb2.FeedMessage()
    try:
        feed.ParseFromString(raw)
    except DecodeError as e:
        raise DecodingError(f"invalid protobuf: {e}") from e

    entities: List[FeedEntity] = []
    for entity in feed.entity:
        trip_update = None
        if entity.HasField("trip_update"):
            trip = entity.trip_update.trip
            if not trip.route_id:
                raise DecodingError(f"entity {entity.id} has no route id")

            stop_time_updates = []
            for stu in entity.trip_update.stop_time_update:
                stop_time_updates.append(
                    StopTimeUpdate(
                        stop_id=stu.stop_id,
                        stop_sequence=stu.stop_sequence if stu.HasField("stop_sequence") else None,
                        arrival=_pb_time_update(stu, "arrival"),
                        departure=_pb_time_update(stu, "departure"),
                    )
                )

            trip_update = TripUpdate(
                trip=TripDescriptor(
                    route_id=trip.route_id,
                    trip_id=trip.trip_id or None,
                    direction_id=trip.direction_id if trip.HasField("direction_id") else None,
                    start_time=trip.start_time or None,
                    start_date=trip.start_date or None,
                ),
                stop_time_updates=stop_time_updates,
            )

        entities.append(FeedEntity(id=entity.id, trip_update=trip_update, is_deleted=entity.is_deleted))

    header = FeedHeader(
        gtfs_realtime_version=feed.header.gtfs_realtime_version or "2.0",
        timestamp=feed.header.timestamp,
    )
    logger.debug(f"Decoded {len(entities)} protobuf entities")
    return FeedMessage(header=header, entities=entities)


def _pb_time_update(stop_time_update, field_name: str) -> Optional[TimeUpdate]:
    if not stop_time_update.HasField(field_name):
        return None
    event = getattr(stop_time_update, field_name)
    return TimeUpdate(
        time=event.time if event.HasField("time") else None,
        delay=event.delay if event.HasField("delay") else None,
    )


def _decode_header(data: Optional[Dict[str, Any]]) -> FeedHeader:
    if data is None:
        return FeedHeader()
    _expect_object(data, "Header")
    return FeedHeader(
        gtfs_realtime_version=_optional_str(data.get("GtfsRealtimeVersion"), "Header.GtfsRealtimeVersion") or "2.0",
        timestamp=_optional_int(data.get("Timestamp"), "Header.Timestamp") or 0,
    )


def _decode_entity(data: Any) -> FeedEntity:
    _expect_object(data, "Entity")
    entity_id = data.get("Id")
    if entity_id is None:
        raise DecodingError("entity is missing Id")
    entity_id = str(entity_id)

    trip_update = None
    if data.get("TripUpdate") is not None:
        trip_update = _decode_trip_update(data["TripUpdate"], entity_id)

    is_deleted = data.get("IsDeleted")
    if is_deleted is not None and not isinstance(is_deleted, bool):
        raise DecodingError(f"entity {entity_id} IsDeleted is not a boolean")

    return FeedEntity(
        id=entity_id,
        trip_update=trip_update,
        is_deleted=bool(is_deleted),
    )


def _decode_trip_update(data: Any, entity_id: str) -> TripUpdate:
    _expect_object(data, f"entity {entity_id} TripUpdate")
    trip_data = data.get("Trip")
    if trip_data is None:
        raise DecodingError(f"entity {entity_id} TripUpdate is missing Trip")
    _expect_object(trip_data, f"entity {entity_id} Trip")

    route_id = trip_data.get("RouteId")
    if not isinstance(route_id, str):
        raise DecodingError(f"entity {entity_id} Trip is missing RouteId")

    context = f"entity {entity_id} Trip"
    trip = TripDescriptor(
        route_id=route_id,
        trip_id=_optional_str(trip_data.get("TripId"), f"{context}.TripId"),
        direction_id=_optional_int(trip_data.get("DirectionId"), f"{context}.DirectionId"),
        start_time=_optional_str(trip_data.get("StartTime"), f"{context}.StartTime"),
        start_date=_optional_str(trip_data.get("StartDate"), f"{context}.StartDate"),
        trip_headsign=_optional_str(trip_data.get("TripHeadsign"), f"{context}.TripHeadsign"),
    )

    stop_time_updates = [
        _decode_stop_time_update(item, entity_id) for item in data.get("StopTimeUpdate") or []
    ]
    return TripUpdate(trip=trip, stop_time_updates=stop_time_updates)


def _decode_stop_time_update(data: Any, entity_id: str) -> StopTimeUpdate:
    _expect_object(data, f"entity {entity_id} StopTimeUpdate")
    stop_id = data.get("StopId")
    # Some converters emit numeric stop ids
    if isinstance(stop_id, int) and not isinstance(stop_id, bool):
        stop_id = str(stop_id)
    if not isinstance(stop_id, str):
        raise DecodingError(f"entity {entity_id} StopTimeUpdate is missing StopId")

    context = f"entity {entity_id} stop {stop_id}"
    return StopTimeUpdate(
        stop_id=stop_id,
        stop_sequence=_optional_int(data.get("StopSequence"), f"{context} StopSequence"),
        arrival=_decode_time_update(data.get("Arrival"), f"{context} Arrival"),
        departure=_decode_time_update(data.get("Departure"), f"{context} Departure"),
    )


def _decode_time_update(data: Any, context: str) -> Optional[TimeUpdate]:
    if data is None:
        return None
    _expect_object(data, context)
    return TimeUpdate(
        time=_optional_int(data.get("Time"), f"{context}.Time"),
        delay=_optional_int(data.get("Delay"), f"{context}.Delay"),
    )


def _expect_object(value: Any, context: str) -> None:
    if not isinstance(value, dict):
        raise DecodingError(f"{context} is not an object")


def _optional_str(value: Any, context: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodingError(f"{context} is not a string")
    return value


def _optional_int(value: Any, context: str) -> Optional[int]:
    if value is None:
        return None
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool):
        raise DecodingError(f"{context} is not an integer")
    if isinstance(value, int):
        return value
    # 64-bit fields may arrive as strings
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise DecodingError(f"{context} is not an integer")
