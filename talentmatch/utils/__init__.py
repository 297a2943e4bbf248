"""Utility helpers for time handling."""

from .timestamps import (
    add_days,
    ensure_utc,
    format_date,
    format_timestamp,
    parse_date,
    parse_timestamp,
    utc_now,
    utc_today,
)

__all__ = [
    "utc_now",
    "utc_today",
    "ensure_utc",
    "format_timestamp",
    "parse_timestamp",
    "format_date",
    "parse_date",
    "add_days",
]
