"""Integration tests for the full ingestion pipeline."""

import asyncio
import json

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from fastapi.testclient import TestClient

from news_aggregator.api.news import create_app
from news_aggregator.config.settings import Settings
from news_aggregator.ingestion.fetcher import RSSFetcher
from news_aggregator.ingestion.interfaces import FeedConfig
from news_aggregator.pipeline.scheduler import IngestionScheduler
from news_aggregator.server import build_app, ingestion_interval_seconds

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Local</title>
    <link>https://local.example</link>
    <description>Local feed</description>
    {items}
  </channel>
</rss>
"""

ITEM = """<item>
      <title>{title}</title>
      <link>https://local.example/{slug}</link>
      <description>About {title}</description>
      <pubDate>{date}</pubDate>
    </item>"""


def feed_body():
    items = [
        ITEM.format(title="Go 1.22 is released", slug="go122", date="Tue, 6 Feb 2024 12:00:00 GMT"),
        ITEM.format(title="Generics in practice", slug="generics", date="Wed, 07 Feb 2024 09:30:00 +0300"),
        ITEM.format(title="Broken date", slug="broken", date="the day before yesterday"),
    ]
    return RSS_FEED.format(items="\n".join(items)).encode()


def rss_app():
    async def good(request):
        return web.Response(body=feed_body(), content_type="application/rss+xml")

    async def failing(request):
        return web.Response(status=500, text="upstream exploded")

    app = web.Application()
    app.router.add_get("/good.xml", good)
    app.router.add_get("/failing.xml", failing)
    return app


async def ingest_twice(storage):
    async with TestServer(rss_app()) as server:
        feeds = [
            FeedConfig(name="good", url=str(server.make_url("/good.xml"))),
            FeedConfig(name="failing", url=str(server.make_url("/failing.xml"))),
        ]
        scheduler = IngestionScheduler(RSSFetcher(timeout_seconds=5), storage, feeds, 60)
        try:
            first = await scheduler.run_once()
            second = await scheduler.run_once()
        finally:
            await scheduler.shutdown()
    return first, second


class TestIngestionPipeline:
    """RSS over HTTP through the scheduler into the store and out of the API."""

    def test_ingest_and_query(self, post_storage):
        """Feeds are ingested once and served by the news API."""
        first, second = asyncio.run(ingest_twice(post_storage))

        assert first.fetched == 3
        assert first.saved == 2
        assert first.failed_feeds == ["failing"]
        assert second.saved == 0
        assert post_storage.count() == 2

        with TestClient(create_app(post_storage, items_per_page=15)) as client:
            latest = client.get("/news/10").json()
            assert [p["title"] for p in latest] == ["Generics in practice", "Go 1.22 is released"]
            assert latest[0]["pub_date"] == "Wed, 07 Feb 2024 06:30:00 +0000"

            search = client.get("/news", params={"s": "GO 1.22"}).json()
            assert [p["link"] for p in search["posts"]] == ["https://local.example/go122"]

            details = client.get("/news/details", params={"id": latest[1]["id"]})
            assert details.json()["title"] == "Go 1.22 is released"


class TestServerWiring:
    """Tests for building services from settings."""

    @pytest.fixture
    def cfg(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("COMMENTS_DATABASE_URL", raising=False)
        feeds_path = tmp_path / "feeds.json"
        feeds_path.write_text(json.dumps({
            "feeds": [{"name": "A", "url": "https://a.example/rss"}],
            "settings": {"request_period_minutes": 2},
        }))
        return Settings(
            feeds_path=feeds_path,
            database_url=f"sqlite:///{tmp_path / 'news.db'}",
            comments_database_url=f"sqlite:///{tmp_path / 'comments.db'}",
            enable_ingestion=False,
        )

    def test_interval_from_feeds_file(self, cfg):
        """Without an explicit setting the feeds file decides."""
        assert ingestion_interval_seconds(cfg) == 120

    def test_explicit_interval_wins(self, cfg):
        """An explicit setting overrides the feeds file."""
        explicit = Settings(feeds_path=cfg.feeds_path, request_period_minutes=0.5)
        assert ingestion_interval_seconds(explicit) == 30

    @pytest.mark.parametrize("service", ["news", "comments", "moderation", "gateway"])
    def test_every_service_builds(self, cfg, service):
        """Each service app starts and answers with a request id."""
        app = build_app(service, cfg)
        with TestClient(app) as client:
            response = client.get("/no-such-route", headers={"X-Request-ID": "wire-1"})
        assert response.status_code == 404
        assert response.headers["X-Request-ID"] == "wire-1"

    def test_unknown_service(self, cfg):
        with pytest.raises(ValueError):
            build_app("billing", cfg)
