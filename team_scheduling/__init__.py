"""Availability and optimal-time scheduling core for teams."""

__version__ = "0.1.0"
