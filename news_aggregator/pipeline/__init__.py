"""Pipeline orchestration."""

from .scheduler import IngestionScheduler, TickReport

__all__ = ["IngestionScheduler", "TickReport"]
