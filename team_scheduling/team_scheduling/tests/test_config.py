"""
Tests for team_scheduling/config.py
"""

import os
import unittest
from unittest.mock import patch

from team_scheduling.config import SchedulingSettings, get_settings


class TestSettings(unittest.TestCase):
	"""Tests for environment-driven settings."""

	def setUp(self):
		get_settings.cache_clear()

	def tearDown(self):
		get_settings.cache_clear()

	def test_defaults(self):
		defaults = SchedulingSettings()

		self.assertEqual(defaults.slot_stride_minutes, 30)
		self.assertEqual(defaults.outlook_page_size, 100)
		self.assertEqual(defaults.default_timezone, "UTC")

	def test_environment_overrides(self):
		"""Test TEAM_SCHEDULING_* variables are cast to the default's type."""
		env = {
			"TEAM_SCHEDULING_SLOT_STRIDE_MINUTES": "15",
			"TEAM_SCHEDULING_PROVIDER_TIMEOUT_SECONDS": "2.5",
			"TEAM_SCHEDULING_DEFAULT_TIMEZONE": "America/Bogota",
		}

		with patch.dict(os.environ, env):
			settings = get_settings()

		self.assertEqual(settings.slot_stride_minutes, 15)
		self.assertEqual(settings.provider_timeout_seconds, 2.5)
		self.assertEqual(settings.default_timezone, "America/Bogota")


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
