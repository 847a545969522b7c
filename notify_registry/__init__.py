"""Notification subscription registry: persistence core."""

__version__ = "0.1.0"
