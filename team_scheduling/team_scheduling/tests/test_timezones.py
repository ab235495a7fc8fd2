"""
Tests for scheduling/timezones.py

Tests golden hours across participants in different timezones.
"""

import unittest
from datetime import date, datetime

import pytz

from team_scheduling.team_scheduling.scheduling.models import WorkingHours
from team_scheduling.team_scheduling.scheduling.timezones import find_golden_hours


def utc(*args):
	return pytz.UTC.localize(datetime(*args))


class TestGoldenHours(unittest.TestCase):
	"""Tests for find_golden_hours."""

	def test_new_york_and_london(self):
		"""Test the winter overlap of 09:00-17:00 in New York and London."""
		users = [
			WorkingHours("alice", "America/New_York"),
			WorkingHours("bob", "Europe/London"),
		]

		ranges = find_golden_hours(users, date(2024, 1, 15))

		self.assertEqual(len(ranges), 1)
		self.assertEqual(ranges[0].start, utc(2024, 1, 15, 14))
		self.assertEqual(ranges[0].end, utc(2024, 1, 15, 17))

	def test_no_overlap(self):
		users = [
			WorkingHours("alice", "Asia/Tokyo"),
			WorkingHours("bob", "Europe/London"),
		]

		self.assertEqual(find_golden_hours(users, date(2024, 1, 15)), [])

	def test_fractional_hours(self):
		"""Test working hours that start on the half hour."""
		users = [WorkingHours("alice", "UTC", start_hour=9.5, end_hour=10.25)]

		ranges = find_golden_hours(users, date(2024, 1, 15))

		self.assertEqual(len(ranges), 1)
		self.assertEqual(ranges[0].start, utc(2024, 1, 15, 9, 30))
		self.assertEqual(ranges[0].end, utc(2024, 1, 15, 10, 15))

	def test_no_users(self):
		self.assertEqual(find_golden_hours([], date(2024, 1, 15)), [])


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
