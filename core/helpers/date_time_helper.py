"""
date_time_helper.py

Helper functions for conversion and formatting of date and time values:
UTC timestamps for logging, local display strings, and the calendar dates
carried by service tickets.

All features and modules should use ONLY these helpers for date/time logic.
"""

from datetime import datetime, date, timezone
from typing import Optional


def _local_tz():
    # Local zone of the machine running the client; technicians work on site.
    return datetime.now().astimezone().tzinfo


def utc_now_iso() -> str:
    """
    Returns the current UTC time as an ISO8601 string (YYYY-MM-DDTHH:MM:SS+00:00).
    Used for logging and DB storage.
    """
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def utc_to_local_str(utc_iso: str) -> str:
    """
    Formats a UTC ISO8601 timestamp as a localized, human-readable string for display.

    :param utc_iso: UTC time as ISO string (from DB/logs)
    :return: String in format "DD.MM.YYYY HH:mm:ss" (local time)
    """
    dt_utc = datetime.fromisoformat(utc_iso)
    if dt_utc.tzinfo is None:
        dt_utc = dt_utc.replace(tzinfo=timezone.utc)
    return dt_utc.astimezone(_local_tz()).strftime("%d.%m.%Y %H:%M:%S")


def parse_request_date(value: object) -> Optional[date]:
    """
    Parse a ticket date coming from the backend.

    Accepts ``date``/``datetime`` objects, plain ``YYYY-MM-DD`` strings and full
    ISO timestamps (``2024-05-01T00:00:00.000Z``). Only the calendar part is kept.
    Empty or unparseable values yield ``None``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def format_request_date(value: Optional[date]) -> str:
    """ISO form used on the wire, '' for unset dates."""
    return value.isoformat() if value else ""


def format_display_date(value: Optional[date]) -> str:
    """
    Short display form for list views, e.g. ``May 1, 2024``.
    """
    if not value:
        return ""
    return f"{value.strftime('%b')} {value.day}, {value.year}"
