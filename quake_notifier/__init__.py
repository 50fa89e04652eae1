"""Seismic event notifier for Discord communities."""

__version__ = "1.0.0"
