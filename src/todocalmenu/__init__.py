"""Launcher-driven management of iCalendar todo directories."""

__version__ = "0.1.0"
