"""Scheduling of the periodic (daily/weekly) alert digests."""

from .service import SchedulerService

__all__ = [
    "SchedulerService",
]
