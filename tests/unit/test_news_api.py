"""Unit tests for the news service API."""

import pytest
from fastapi.testclient import TestClient

from news_aggregator.api.news import create_app, parse_page
from news_aggregator.ingestion.interfaces import FeedItem


@pytest.fixture
def client(post_storage, sample_items):
    post_storage.save_batch(sample_items)
    app = create_app(post_storage, items_per_page=2)
    with TestClient(app) as client:
        yield client


class TestParsePage:
    """Tests for parse_page."""

    @pytest.mark.parametrize("value,expected", [
        (None, 1), ("", 1), ("abc", 1), ("0", 1), ("-3", 1), ("1", 1), ("4", 4),
    ])
    def test_fallback_to_first_page(self, value, expected):
        """Invalid page numbers mean page 1."""
        assert parse_page(value) == expected


class TestLastNews:
    """Tests for GET /news/{n}."""

    def test_newest_first(self, client):
        """Should return the n newest posts."""
        response = client.get("/news/2")

        assert response.status_code == 200
        posts = response.json()
        assert [p["title"] for p in posts] == [
            "Python packaging in 2024",
            "Routing enhancements for Go 1.22",
        ]
        assert set(posts[0]) == {"id", "title", "content", "pub_time", "pub_date", "link"}

    def test_more_than_stored(self, client):
        """Asking for more than exist returns everything."""
        assert len(client.get("/news/100").json()) == 3

    def test_zero(self, client):
        """n = 0 returns an empty list."""
        response = client.get("/news/0")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.parametrize("path", ["/news/-1", "/news/abc"])
    def test_invalid_n(self, client, path):
        """Negative or non-numeric n is a client error."""
        response = client.get(path)
        assert response.status_code == 400
        assert "error" in response.json()


class TestDetails:
    """Tests for GET /news/details."""

    def test_found(self, client):
        """Should return a single post."""
        newest = client.get("/news/1").json()[0]

        response = client.get("/news/details", params={"id": newest["id"]})

        assert response.status_code == 200
        assert response.json() == newest

    def test_not_found(self, client):
        """A missing post is 404."""
        response = client.get("/news/details", params={"id": 9999})
        assert response.status_code == 404
        assert response.json() == {"error": "Post not found"}

    @pytest.mark.parametrize("params", [{}, {"id": "x"}])
    def test_bad_id(self, client, params):
        """A missing or non-numeric id is 400."""
        assert client.get("/news/details", params=params).status_code == 400


class TestSearch:
    """Tests for GET /news."""

    def test_paginates(self, client):
        """Results are split into pages of the configured size."""
        first = client.get("/news", params={"s": "go", "page": "1"}).json()
        second = client.get("/news", params={"s": "go", "page": "2"}).json()

        assert first["pagination"] == {
            "current_page": 1,
            "total_pages": 1,
            "items_per_page": 2,
            "total_matches": 2,
        }
        assert len(first["posts"]) == 2
        assert second["posts"] == []
        assert second["pagination"]["total_matches"] == 2

    def test_empty_query_lists_all(self, client):
        """No search text matches every post."""
        body = client.get("/news").json()

        assert body["pagination"]["total_matches"] == 3
        assert body["pagination"]["total_pages"] == 2
        assert len(body["posts"]) == 2

    def test_bad_page_is_first_page(self, client):
        """An invalid page falls back to page 1."""
        body = client.get("/news", params={"page": "zero"}).json()
        assert body["pagination"]["current_page"] == 1

    def test_no_matches(self, client):
        """A query nothing matches has zero pages."""
        body = client.get("/news", params={"s": "nonexistent"}).json()
        assert body["posts"] == []
        assert body["pagination"]["total_pages"] == 0


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client):
        """Should report post count and ingestion state."""
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["posts"] == 3
        assert body["ingestion"] is False

    def test_request_id_echoed(self, client):
        """Responses carry the inbound request id."""
        response = client.get("/health", headers={"X-Request-ID": "news-42"})
        assert response.headers["X-Request-ID"] == "news-42"


class TestIngestionWiring:
    """The app starts and stops its scheduler with the lifespan."""

    def test_scheduler_lifecycle(self, post_storage):
        """Startup starts the scheduler and shutdown stops it."""
        events = []

        class RecordingScheduler:
            running = False

            def start(self):
                events.append("start")
                self.running = True

            async def shutdown(self):
                events.append("shutdown")
                self.running = False

        scheduler = RecordingScheduler()
        with TestClient(create_app(post_storage, scheduler=scheduler)) as client:
            assert client.get("/health").json()["ingestion"] is True

        assert events == ["start", "shutdown"]

    def test_item_saved_after_start_is_visible(self, post_storage):
        """Writes from ingestion are seen by queries."""
        with TestClient(create_app(post_storage)) as client:
            assert client.get("/news/5").json() == []
            post_storage.save_batch([FeedItem(title="Fresh", link="https://x.example/1",
                                              pub_date="Mon, 02 Jan 2006 15:04:05 GMT")])
            assert [p["title"] for p in client.get("/news/5").json()] == ["Fresh"]
