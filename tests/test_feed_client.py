"""Tests for FeedClient."""

import json
import unittest
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

# Add src to path so we can import bustrack
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bustrack.config import Config
from bustrack.errors import DecodingError, InvalidResponse, InvalidURL
from bustrack.feed_client import FeedClient

FEED = {
    "Header": {"GtfsRealtimeVersion": "2.0", "Timestamp": 1760880000},
    "Entity": [
        {
            "Id": "1",
            "TripUpdate": {
                "Trip": {"RouteId": "7-288", "DirectionId": 0},
                "StopTimeUpdate": [{"StopSequence": 1, "StopId": "8922", "Arrival": {"Time": 1760880300}}],
            },
        }
    ],
}


def mock_response(status_code=200, body=b""):
    response = MagicMock()
    response.status_code = status_code
    response.content = body
    response.text = body.decode("utf-8", errors="replace")
    return response


class TestFeedClient(unittest.TestCase):
    """Test fetching the TripUpdates feed."""

    def setUp(self):
        self.session = MagicMock()
        self.config = Config(api_url="https://example.test/TripUpdates", api_key="secret", timeout_s=30.0)
        self.client = FeedClient(self.config, session=self.session)

    def test_fetch_feed_decodes_json(self):
        self.session.get.return_value = mock_response(body=json.dumps(FEED).encode("utf-8"))

        feed = self.client.fetch_feed()

        self.assertEqual(len(feed.entities), 1)
        self.assertEqual(feed.entities[0].trip_update.trip.route_id, "7-288")

    def test_request_headers_and_timeout(self):
        self.session.get.return_value = mock_response(body=b"{}")

        self.client.fetch_feed()

        args, kwargs = self.session.get.call_args
        self.assertEqual(args[0], "https://example.test/TripUpdates?format=json")
        self.assertEqual(kwargs["headers"]["Ocp-Apim-Subscription-Key"], "secret")
        self.assertEqual(kwargs["headers"]["Accept"], "application/json")
        self.assertEqual(kwargs["timeout"], 30.0)

    def test_existing_query_string(self):
        client = FeedClient(Config(api_url="https://example.test/TripUpdates?agency=oc"), session=self.session)
        self.assertEqual(client.feed_url, "https://example.test/TripUpdates?agency=oc&format=json")

    def test_invalid_url(self):
        client = FeedClient(Config(api_url="not a url"), session=self.session)
        with self.assertRaises(InvalidURL):
            client.fetch_feed()
        self.session.get.assert_not_called()

    def test_non_200_response(self):
        self.session.get.return_value = mock_response(status_code=401, body=b"Access denied")
        with self.assertRaises(InvalidResponse):
            self.client.fetch_feed()

    def test_transport_error(self):
        self.session.get.side_effect = requests.Timeout("timed out")
        with self.assertRaises(InvalidResponse):
            self.client.fetch_feed()

    def test_malformed_body(self):
        self.session.get.return_value = mock_response(body=b"not json")
        with self.assertRaises(DecodingError):
            self.client.fetch_feed()

    def test_cache_reused_within_ttl(self):
        self.session.get.return_value = mock_response(body=b"{}")

        self.client.fetch_feed()
        self.client.fetch_feed()
        self.assertEqual(self.session.get.call_count, 1)

        self.client.clear_cache()
        self.client.fetch_feed()
        self.assertEqual(self.session.get.call_count, 2)

    def test_cache_expires_after_ttl(self):
        self.session.get.return_value = mock_response(body=b"{}")

        with patch("bustrack.feed_client.time.time", return_value=1000.0):
            self.client.fetch_feed()
        with patch("bustrack.feed_client.time.time", return_value=1029.0):
            self.client.fetch_feed()
        self.assertEqual(self.session.get.call_count, 1)

        self.session.get.return_value = mock_response(status_code=503, body=b"busy")
        with patch("bustrack.feed_client.time.time", return_value=1030.0):
            with self.assertRaises(InvalidResponse):
                self.client.fetch_feed()
        self.assertEqual(self.session.get.call_count, 2)
        self.assertIsNone(self.client._cached)

    def test_cache_disabled(self):
        client = FeedClient(Config(api_url="https://example.test/TripUpdates", cache_ttl_s=0), session=self.session)
        self.session.get.return_value = mock_response(body=b"{}")

        client.fetch_feed()
        client.fetch_feed()
        self.assertEqual(self.session.get.call_count, 2)

    def test_protobuf_feed(self):
        from google.transit import gtfs_realtime_pb2

        message = gtfs_realtime_pb2.FeedMessage()
        message.header.gtfs_realtime_version = "2.0"
        entity = message.entity.add()
        entity.id = "1"
        entity.trip_update.trip.route_id = "88-1"
        self.session.get.return_value = mock_response(body=message.SerializeToString())

        client = FeedClient(
            Config(api_url="https://example.test/TripUpdates", feed_format="protobuf"), session=self.session
        )
        feed = client.fetch_feed()

        self.assertEqual(feed.entities[0].trip_update.trip.route_id, "88-1")
        args, kwargs = self.session.get.call_args
        self.assertEqual(args[0], "https://example.test/TripUpdates")
        self.assertNotIn("Accept", kwargs["headers"])


class TestConfig(unittest.TestCase):
    """Test environment configuration."""

    def test_from_env(self):
        env = {
            "BUSTRACK_API_URL": "https://example.test/feed",
            "BUSTRACK_API_KEY": "k",
            "BUSTRACK_TIMEOUT_S": "12.5",
            "BUSTRACK_DATA_DIR": "/srv/bustrack",
            "BUSTRACK_FEED_FORMAT": "Protobuf",
        }
        with patch.dict("os.environ", env, clear=True):
            config = Config.from_env()

        self.assertEqual(config.api_url, "https://example.test/feed")
        self.assertEqual(config.api_key, "k")
        self.assertEqual(config.timeout_s, 12.5)
        self.assertEqual(config.cache_ttl_s, 30.0)
        self.assertEqual(config.data_dir, "/srv/bustrack")
        self.assertEqual(config.feed_format, "protobuf")

    def test_unknown_feed_format(self):
        with patch.dict("os.environ", {"BUSTRACK_FEED_FORMAT": "xml"}, clear=True):
            with self.assertRaises(ValueError):
                Config.from_env()


if __name__ == "__main__":
    unittest.main()
