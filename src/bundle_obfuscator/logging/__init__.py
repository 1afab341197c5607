"""Structured logging utilities."""

from .events import JsonlRunLog, RunEvent, utc_timestamp

__all__ = ["JsonlRunLog", "RunEvent", "utc_timestamp"]
