"""
Tests for scheduling/intervals.py

Tests the half-open overlap predicate and the wall-clock helpers.
"""

import unittest
from datetime import date, datetime, time, timedelta, timezone

import pytz

from team_scheduling.team_scheduling.scheduling.intervals import (
	TimeInterval,
	at_time_on_date,
	ensure_aware,
	js_weekday,
	localize,
	overlaps,
	parse_hhmm,
	zone_of,
)


def utc(*args):
	return pytz.UTC.localize(datetime(*args))


class TestOverlaps(unittest.TestCase):
	"""Tests for the overlap predicate."""

	def test_partial_overlap(self):
		"""Test intervals sharing part of their range."""
		a = TimeInterval(utc(2024, 1, 1, 9), utc(2024, 1, 1, 10))
		b = TimeInterval(utc(2024, 1, 1, 9, 30), utc(2024, 1, 1, 11))

		self.assertTrue(overlaps(a, b))
		self.assertTrue(overlaps(b, a))

	def test_adjacent_intervals_do_not_overlap(self):
		"""Test that a.end == b.start is not an overlap."""
		a = TimeInterval(utc(2024, 1, 1, 9), utc(2024, 1, 1, 10))
		b = TimeInterval(utc(2024, 1, 1, 10), utc(2024, 1, 1, 11))

		self.assertFalse(overlaps(a, b))
		self.assertFalse(overlaps(b, a))

	def test_contained_interval(self):
		"""Test an interval fully inside another."""
		outer = TimeInterval(utc(2024, 1, 1, 8), utc(2024, 1, 1, 18))
		inner = TimeInterval(utc(2024, 1, 1, 12), utc(2024, 1, 1, 13))

		self.assertTrue(overlaps(outer, inner))

	def test_empty_interval_rejected(self):
		"""Test that start must be strictly before end."""
		with self.assertRaises(ValueError):
			TimeInterval(utc(2024, 1, 1, 9), utc(2024, 1, 1, 9))

		with self.assertRaises(ValueError):
			TimeInterval(utc(2024, 1, 1, 10), utc(2024, 1, 1, 9))

	def test_duration(self):
		interval = TimeInterval(utc(2024, 1, 1, 9), utc(2024, 1, 1, 10, 30))
		self.assertEqual(interval.duration, timedelta(minutes=90))


class TestTimeHelpers(unittest.TestCase):
	"""Tests for HH:MM parsing and timezone helpers."""

	def test_parse_hhmm(self):
		"""Test valid HH:MM strings and other accepted inputs."""
		self.assertEqual(parse_hhmm("09:30"), time(9, 30))
		self.assertEqual(parse_hhmm("23:59"), time(23, 59))
		self.assertEqual(parse_hhmm(time(8, 0)), time(8, 0))
		self.assertEqual(parse_hhmm(timedelta(hours=14, minutes=15)), time(14, 15))

	def test_parse_hhmm_invalid(self):
		"""Test malformed time strings."""
		for value in ["24:00", "9:00", "12:60", "noon", ""]:
			with self.assertRaises(ValueError):
				parse_hhmm(value)

	def test_ensure_aware_localizes_naive(self):
		"""Test that naive datetimes are read as local time of the zone."""
		result = ensure_aware(datetime(2024, 1, 1, 9), "America/Bogota")

		self.assertEqual(result.astimezone(pytz.UTC), utc(2024, 1, 1, 14))

	def test_ensure_aware_keeps_aware(self):
		value = utc(2024, 1, 1, 9)
		self.assertIs(ensure_aware(value, "America/Bogota"), value)

	def test_at_time_on_date_dst(self):
		"""Test that the offset follows the date (summer vs winter)."""
		winter = at_time_on_date(date(2024, 1, 15), time(9, 0), "America/New_York")
		summer = at_time_on_date(date(2024, 7, 15), time(9, 0), "America/New_York")

		self.assertEqual(winter.astimezone(pytz.UTC).hour, 14)
		self.assertEqual(summer.astimezone(pytz.UTC).hour, 13)

	def test_zone_of_recovers_iana_zone(self):
		"""Test the full zone is recovered from a pytz-localized datetime."""
		new_york = pytz.timezone("America/New_York")
		winter = new_york.localize(datetime(2024, 1, 15, 9))

		tz = zone_of(winter)
		summer = localize(datetime(2024, 7, 15, 9), tz)

		self.assertEqual(summer.astimezone(pytz.UTC), utc(2024, 7, 15, 13))

	def test_localize_standard_tzinfo(self):
		result = localize(datetime(2024, 1, 1, 9), timezone.utc)
		self.assertEqual(result, utc(2024, 1, 1, 9))

	def test_js_weekday(self):
		"""Test weekday numbering with Sunday as 0."""
		self.assertEqual(js_weekday(date(2024, 1, 7)), 0)
		self.assertEqual(js_weekday(date(2024, 1, 1)), 1)
		self.assertEqual(js_weekday(date(2024, 1, 6)), 6)


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
