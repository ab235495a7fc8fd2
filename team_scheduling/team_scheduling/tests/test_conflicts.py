"""
Tests for scheduling/conflicts.py

Tests transitive grouping of overlapping events.
"""

import unittest
from datetime import datetime

import pytz

from team_scheduling.team_scheduling.scheduling.conflicts import conflict_groups, group_overlaps
from team_scheduling.team_scheduling.scheduling.models import ConflictGroup, EventInstance


def event(event_id, start_hour, start_minute, end_hour, end_minute):
	tz = pytz.UTC
	return EventInstance(
		id=event_id,
		source_event_id=event_id,
		start=tz.localize(datetime(2024, 1, 1, start_hour, start_minute)),
		end=tz.localize(datetime(2024, 1, 1, end_hour, end_minute)),
		title=event_id
	)


class TestGroupOverlaps(unittest.TestCase):
	"""Tests for conflict grouping."""

	def test_chain_is_transitive(self):
		"""Test A-B and B-C overlapping end up in one group even if A and C do not."""
		a = event("A", 9, 0, 10, 0)
		b = event("B", 9, 30, 10, 30)
		c = event("C", 10, 15, 11, 0)
		d = event("D", 12, 0, 13, 0)

		result = group_overlaps([d, c, a, b])

		self.assertEqual(len(result), 2)
		self.assertIsInstance(result[0], ConflictGroup)
		self.assertEqual([e.id for e in result[0].events], ["A", "B", "C"])
		self.assertEqual(result[0].start, a.start)
		self.assertEqual(result[0].end, c.end)
		self.assertIs(result[1], d)

	def test_long_event_covers_later_ones(self):
		"""Test grouping against the envelope, not only the previous event."""
		a = event("A", 9, 0, 12, 0)
		b = event("B", 9, 30, 10, 0)
		c = event("C", 11, 0, 11, 30)

		result = group_overlaps([a, b, c])

		self.assertEqual(len(result), 1)
		self.assertEqual(len(result[0].events), 3)

	def test_adjacent_events_are_separate(self):
		a = event("A", 9, 0, 10, 0)
		b = event("B", 10, 0, 11, 0)

		self.assertEqual(group_overlaps([a, b]), [a, b])
		self.assertEqual(conflict_groups([a, b]), [])

	def test_conflict_groups_only(self):
		a = event("A", 9, 0, 10, 0)
		b = event("B", 9, 30, 10, 30)
		c = event("C", 14, 0, 15, 0)

		groups = conflict_groups([a, b, c])

		self.assertEqual(len(groups), 1)
		self.assertEqual([e.id for e in groups[0].events], ["A", "B"])

	def test_empty(self):
		self.assertEqual(group_overlaps([]), [])


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
