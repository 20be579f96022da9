"""RSS feed fetcher with async support and bounded concurrency."""

import asyncio
import time
from typing import List, Optional

import aiohttp
import feedparser
import structlog

from .interfaces import FeedConfig, FeedItem, FetchReport, FetcherInterface
from ..config.settings import settings

logger = structlog.get_logger()


class RSSFetcher(FetcherInterface):
    """Async RSS/Atom fetcher. One failing feed never hides the others."""

    def __init__(self, timeout_seconds: float = None, max_concurrency: int = None):
        self.timeout_seconds = timeout_seconds or settings.fetch_timeout_seconds
        self.semaphore = asyncio.Semaphore(max_concurrency or settings.fetch_max_concurrency)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self._get_session()
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={"User-Agent": "NewsAggregatorBot/1.0"}
            )
        return self._session

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def fetch_feed(self, config: FeedConfig) -> List[FeedItem]:
        """Fetch items from a single feed."""
        session = await self._get_session()
        async with self.semaphore:
            start_time = time.time()
            async with session.get(config.url) as response:
                response.raise_for_status()
                body = await response.read()

            # Parsing runs off the event loop
            items = await asyncio.to_thread(self.parse, body, config)
            elapsed_ms = int((time.time() - start_time) * 1000)
            logger.info(
                "feed_fetched",
                feed=config.name,
                items=len(items),
                time_ms=elapsed_ms
            )
            return items

    async def fetch_all(self, configs: List[FeedConfig]) -> FetchReport:
        """Fetch from all enabled feeds concurrently."""
        enabled_configs = [c for c in configs if c.enabled]

        tasks = [self.fetch_feed(config) for config in enabled_configs]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        report = FetchReport()
        for config, result in zip(enabled_configs, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "feed_fetch_failed",
                    feed=config.name,
                    url=config.url,
                    error=str(result) or type(result).__name__
                )
                report.failed_feeds.append(config.name)
                continue
            report.items.extend(result)

        logger.info(
            "all_feeds_fetched",
            items=len(report.items),
            feeds=len(enabled_configs),
            failed=len(report.failed_feeds)
        )
        return report

    def parse(self, body, config: FeedConfig) -> List[FeedItem]:
        """Parse a raw feed document."""
        feed = feedparser.parse(body)
        if feed.bozo and not feed.entries:
            raise ValueError(f"unparseable feed: {feed.get('bozo_exception')}")

        items = []
        for entry in feed.entries:
            item = self._parse_entry(entry, config)
            if item:
                items.append(item)
        return items

    def _parse_entry(self, entry, config: FeedConfig) -> Optional[FeedItem]:
        """Parse a feed entry into a FeedItem."""
        link = entry.get("link")
        if not link:
            return None

        content = entry.get("summary", "")
        if entry.get("content"):
            content = entry.content[0].get("value", content)

        return FeedItem(
            title=entry.get("title", ""),
            content=content,
            pub_date=entry.get("published") or entry.get("updated") or "",
            link=link,
            source=config.name,
        )
