"""Test helper utilities for Talent Match tests."""

from .factories import (
    DEFAULT_PUBLISHED_AT,
    get_alert,
    make_alert,
    make_calendar_entry,
    make_offer,
    make_talent,
    seed,
)

__all__ = [
    "DEFAULT_PUBLISHED_AT",
    "get_alert",
    "make_talent",
    "make_offer",
    "make_alert",
    "make_calendar_entry",
    "seed",
]
