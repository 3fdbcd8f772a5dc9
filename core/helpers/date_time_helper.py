"""
date_time_helper.py

Helper functions for conversion and formatting of date, time and money values,
with focus on UTC storage and Europe/Paris display (technicians work in France).

All features and modules should use ONLY these helpers for date/time logic.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Union
from zoneinfo import ZoneInfo

# Local timezone for display
LOCAL_TZ = ZoneInfo("Europe/Paris")

# fr-FR currency formatting separators
NARROW_NBSP = "\u202f"
NBSP = "\u00a0"

DateLike = Union[date, datetime, str]


def utc_now_iso() -> str:
    """
    Returns the current UTC time as an ISO8601 string (YYYY-MM-DDTHH:MM:SS+00:00).
    Used for logging and DB storage.
    """
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def parse_api_datetime(value: DateLike) -> datetime:
    """
    Parses the ISO strings returned by the backend ("2025-03-01T08:00:00.000Z").
    Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _to_local(value: DateLike) -> datetime:
    if isinstance(value, date) and not isinstance(value, datetime):
        # plain dates carry no time zone, show them as-is
        return datetime(value.year, value.month, value.day, tzinfo=LOCAL_TZ)
    return parse_api_datetime(value).astimezone(LOCAL_TZ)


def format_date(value: DateLike) -> str:
    """'DD/MM/YYYY' in local time."""
    return _to_local(value).strftime("%d/%m/%Y")


def format_date_time(value: DateLike) -> str:
    """'DD/MM/YYYY HH:MM' in local time."""
    return _to_local(value).strftime("%d/%m/%Y %H:%M")


def utc_to_local_str(utc_iso: str) -> str:
    """
    Formats a UTC ISO8601 timestamp as a human-readable local string for log views.

    :param utc_iso: UTC time as ISO string (from DB/logs)
    :return: String in format "DD/MM/YYYY HH:MM:SS" (local time)
    """
    return parse_api_datetime(utc_iso).astimezone(LOCAL_TZ).strftime("%d/%m/%Y %H:%M:%S")


def format_price(amount: Union[int, float, Decimal]) -> str:
    """
    Euro amount in French notation: '1 234,50 €'.
    The thousands separator is a narrow no-break space like Intl's fr-FR output.
    """
    quantized = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    integer, _, cents = f"{abs(quantized):.2f}".partition(".")
    groups = []
    while len(integer) > 3:
        groups.insert(0, integer[-3:])
        integer = integer[:-3]
    groups.insert(0, integer)
    return f"{sign}{NARROW_NBSP.join(groups)},{cents}{NBSP}€"
