"""Periodic feed ingestion.

``IngestionScheduler.run_once`` performs one deterministic tick: fetch every
enabled feed, merge the results into one batch and save it. ``start`` wraps
the tick in an APScheduler interval job that keeps running until ``stop``.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import structlog

from ..errors import StoreError
from ..ingestion.interfaces import FeedConfig, FetcherInterface, StorageInterface

logger = structlog.get_logger()

JOB_ID = "ingest_feeds"


@dataclass
class TickReport:
    """Outcome of one ingestion tick."""
    fetched: int = 0
    saved: int = 0
    failed_feeds: List[str] = field(default_factory=list)
    error: Optional[str] = None
    elapsed_seconds: float = 0.0


class IngestionScheduler:
    """Polls every configured feed at a fixed interval."""

    def __init__(
        self,
        fetcher: FetcherInterface,
        storage: StorageInterface,
        feeds: List[FeedConfig],
        interval_seconds: float,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.fetcher = fetcher
        self.storage = storage
        self.feeds = feeds
        self.interval_seconds = interval_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def run_once(self) -> TickReport:
        """Fetch all feeds and save them as one batch. Never raises on feed or store errors."""
        logger.info("ingestion_tick_started", feeds=len(self.feeds))
        start_time = datetime.now()
        report = TickReport()

        fetch_report = await self.fetcher.fetch_all(self.feeds)
        report.fetched = len(fetch_report.items)
        report.failed_feeds = list(fetch_report.failed_feeds)

        if fetch_report.items:
            try:
                # Keep the event loop free for request handlers while writing
                report.saved = await asyncio.to_thread(
                    self.storage.save_batch, fetch_report.items
                )
            except StoreError as e:
                report.error = str(e)
                logger.error("ingestion_save_failed", error=str(e), items=report.fetched)

        report.elapsed_seconds = (datetime.now() - start_time).total_seconds()
        logger.info(
            "ingestion_tick_completed",
            fetched=report.fetched,
            saved=report.saved,
            failed_feeds=report.failed_feeds,
            elapsed_seconds=report.elapsed_seconds
        )
        return report

    async def _tick(self):
        try:
            await self.run_once()
        except Exception as e:
            # A broken tick must not kill the schedule; the next tick retries
            logger.exception("ingestion_tick_failed", error=str(e))

    def start(self) -> None:
        """Schedule ticks every interval, the first one immediately.

        Must be called from a running event loop.
        """
        if self.running:
            return
        self._scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self._scheduler.add_job(
            self._tick,
            IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            name="Fetch RSS feeds",
            next_run_time=datetime.now(timezone.utc),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("ingestion_scheduler_started", interval_seconds=self.interval_seconds,
                    feeds=len(self.feeds))

    def stop(self) -> None:
        """Stop scheduling. A tick already in flight is left to finish."""
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("ingestion_scheduler_stopped")

    async def shutdown(self) -> None:
        """Stop scheduling and release the fetcher's HTTP session."""
        self.stop()
        await self.fetcher.close()
