"""Tests for departure construction and route helpers."""

import unittest
import sys
from pathlib import Path

# Add src to path so we can import bustrack
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bustrack.departure_builder import build_departure, in_window, minutes_until, select_timestamp
from bustrack.models import StopTimeUpdate, TimeUpdate
from bustrack.routes import direction_fallback, matches_route_filter, route_name, route_number

NOW = 1760880000


class TestSelectTimestamp(unittest.TestCase):
    """Test choosing between arrival and departure times."""

    def test_prefers_arrival(self):
        update = StopTimeUpdate(stop_id="8922", arrival=TimeUpdate(time=NOW + 60), departure=TimeUpdate(time=NOW + 90))
        self.assertEqual(select_timestamp(update), NOW + 60)

    def test_zero_arrival_uses_departure(self):
        update = StopTimeUpdate(stop_id="8922", arrival=TimeUpdate(time=0), departure=TimeUpdate(time=NOW + 90))
        self.assertEqual(select_timestamp(update), NOW + 90)

        update = StopTimeUpdate(stop_id="8922", arrival=TimeUpdate(delay=30), departure=TimeUpdate(time=NOW + 90))
        self.assertEqual(select_timestamp(update), NOW + 90)

    def test_negative_arrival_uses_departure(self):
        update = StopTimeUpdate(stop_id="8922", arrival=TimeUpdate(time=-60), departure=TimeUpdate(time=NOW + 90))
        self.assertEqual(select_timestamp(update), NOW + 90)

        update = StopTimeUpdate(stop_id="8922", arrival=TimeUpdate(time=-60), departure=TimeUpdate(time=-30))
        self.assertIsNone(select_timestamp(update))

    def test_no_time(self):
        self.assertIsNone(select_timestamp(StopTimeUpdate(stop_id="8922")))
        self.assertIsNone(select_timestamp(StopTimeUpdate(stop_id="8922", departure=TimeUpdate(time=0))))


class TestMinutes(unittest.TestCase):
    """Test the minute arithmetic and inclusion window."""

    def test_minutes_until(self):
        self.assertEqual(minutes_until(NOW + 300, NOW), 5)
        self.assertEqual(minutes_until(NOW + 359, NOW), 5)
        self.assertEqual(minutes_until(NOW + 59, NOW), 0)
        self.assertEqual(minutes_until(NOW - 59, NOW), 0)
        self.assertEqual(minutes_until(NOW - 61, NOW), -1)
        self.assertEqual(minutes_until(NOW - 330, NOW), -5)

    def test_window_bounds(self):
        self.assertTrue(in_window(120))
        self.assertFalse(in_window(121))
        self.assertTrue(in_window(-5))
        self.assertFalse(in_window(-6))
        self.assertTrue(in_window(0))


class TestBuildDeparture(unittest.TestCase):
    """Test building Departure records."""

    def test_future_departure(self):
        departure = build_departure("e1", "7-288", "Carleton", 5, 0, "8922", "RIDEAU / WILLIAM")

        self.assertEqual(departure.id, "e1")
        self.assertEqual(departure.route_number, "7")
        self.assertEqual(departure.route_name, "7 Carleton")
        self.assertEqual(departure.destination, "Carleton")
        self.assertEqual(departure.minutes_until_arrival, 5)
        self.assertFalse(departure.is_arriving_now)
        self.assertEqual(departure.direction_id, 0)
        self.assertEqual(departure.stop_id, "8922")
        self.assertEqual(departure.stop_name, "RIDEAU / WILLIAM")

    def test_past_departure_is_clamped(self):
        departure = build_departure("e1", "19-1", "Hurdman", -3, 1, "8922")
        self.assertEqual(departure.minutes_until_arrival, 0)
        self.assertTrue(departure.is_arriving_now)
        self.assertEqual(departure.route_name, "19-1")
        self.assertIsNone(departure.stop_name)

    def test_zero_minutes_is_arriving_now(self):
        self.assertTrue(build_departure("e1", "19-1", "Hurdman", 0, 1, "8922").is_arriving_now)


class TestRoutes(unittest.TestCase):
    """Test route helpers."""

    def test_route_number(self):
        self.assertEqual(route_number("7-288"), "7")
        self.assertEqual(route_number("88-1-2"), "88")
        self.assertEqual(route_number("1"), "1")

    def test_route_name(self):
        self.assertEqual(route_name("94-28"), "Route 94")
        self.assertEqual(route_name("94-29"), "94-29")

    def test_direction_fallback(self):
        self.assertEqual(direction_fallback("19", 0), "Parliament")
        self.assertEqual(direction_fallback("97", 1), "Airport")
        self.assertEqual(direction_fallback("97", None), "Destination")
        self.assertEqual(direction_fallback("400", 0), "Destination")

    def test_route_filter(self):
        self.assertTrue(matches_route_filter("7-288", ["7"]))
        self.assertFalse(matches_route_filter("70-1", ["7"]))
        self.assertTrue(matches_route_filter("7-288", ["7-288"]))
        self.assertFalse(matches_route_filter("7-289", ["7-288"]))
        self.assertTrue(matches_route_filter("88-1", ["7", "88"]))
        self.assertTrue(matches_route_filter("70-1", None))
        self.assertTrue(matches_route_filter("70-1", []))


if __name__ == "__main__":
    unittest.main()
