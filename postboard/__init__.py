"""Postboard: persistence, configuration and logging for the scheduling dashboard."""

__version__ = "1.0.0"
