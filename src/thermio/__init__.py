"""Thermio - fleet temperature-compliance backend."""

__version__ = "0.1.0"
