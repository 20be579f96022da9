"""Pytest configuration and shared fixtures."""

import pytest
import tempfile
import os
from pathlib import Path

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))


def _temp_sqlite_url():
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    return db_path, f"sqlite:///{db_path}"


@pytest.fixture
def temp_db():
    """Provide a temporary database file."""
    db_path, url = _temp_sqlite_url()
    yield url
    # Cleanup
    try:
        os.unlink(db_path)
    except (FileNotFoundError, PermissionError):
        pass


@pytest.fixture
def temp_comments_db():
    """Provide a second temporary database file for comments."""
    db_path, url = _temp_sqlite_url()
    yield url
    try:
        os.unlink(db_path)
    except (FileNotFoundError, PermissionError):
        pass


@pytest.fixture
def post_storage(temp_db):
    """A PostStorage on a fresh database."""
    from news_aggregator.storage.posts import PostStorage
    storage = PostStorage(temp_db)
    yield storage
    storage.close()


@pytest.fixture
def comment_storage(temp_comments_db):
    """A CommentStorage on a fresh database."""
    from news_aggregator.storage.comments import CommentStorage
    storage = CommentStorage(temp_comments_db)
    yield storage
    storage.close()


@pytest.fixture
def sample_feed_config():
    """Provide a sample feed configuration."""
    from news_aggregator.ingestion.interfaces import FeedConfig
    return FeedConfig(
        name="Go Blog",
        url="https://go.dev/blog/feed.atom",
    )


@pytest.fixture
def sample_items():
    """Three feed items published on consecutive days."""
    from news_aggregator.ingestion.interfaces import FeedItem
    return [
        FeedItem(
            title="Go 1.22 is released",
            content="The latest Go release brings range over integers.",
            pub_date="Tue, 06 Feb 2024 12:00:00 +0000",
            link="https://go.dev/blog/go1.22",
            source="Go Blog",
        ),
        FeedItem(
            title="Routing enhancements for Go 1.22",
            content="Patterns in net/http now support methods and wildcards.",
            pub_date="Wed, 07 Feb 2024 12:00:00 +0000",
            link="https://go.dev/blog/routing-enhancements",
            source="Go Blog",
        ),
        FeedItem(
            title="Python packaging in 2024",
            content="pyproject.toml everywhere.",
            pub_date="Thu, 08 Feb 2024 12:00:00 +0000",
            link="https://example.com/python-packaging",
            source="Example",
        ),
    ]
