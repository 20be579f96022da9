"""Interface definitions for data ingestion."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Sequence

from .timeparse import format_pub_date, to_unix


@dataclass
class FeedConfig:
    """Configuration for a single feed."""
    name: str
    url: str
    enabled: bool = True


@dataclass
class FeedItem:
    """An entry as published by a feed, before its date is parsed."""
    title: str = ""
    content: str = ""
    pub_date: str = ""
    link: str = ""
    source: str = ""


@dataclass
class Post:
    """A stored news item."""
    id: Optional[int] = None
    title: str = ""
    content: str = ""
    published_at: Optional[datetime] = None
    link: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "pub_time": to_unix(self.published_at) if self.published_at else None,
            "pub_date": format_pub_date(self.published_at) if self.published_at else None,
            "link": self.link,
        }


@dataclass
class SearchResult:
    """One page of a title search plus the unpaginated match count."""
    items: List[Post] = field(default_factory=list)
    total_matches: int = 0

    def total_pages(self, page_size: int) -> int:
        return (self.total_matches + page_size - 1) // page_size


@dataclass
class FetchReport:
    """Items collected in one pass over the configured feeds."""
    items: List[FeedItem] = field(default_factory=list)
    failed_feeds: List[str] = field(default_factory=list)


class FetcherInterface:
    """Interface for feed fetching."""

    async def fetch_feed(self, config: FeedConfig) -> List[FeedItem]:
        """Fetch items from a single feed."""
        raise NotImplementedError

    async def fetch_all(self, configs: List[FeedConfig]) -> FetchReport:
        """Fetch from all configured feeds."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release network resources."""


class StorageInterface:
    """Interface for post storage."""

    def save_batch(self, items: Sequence[FeedItem]) -> int:
        """Persist a batch atomically, skipping known links. Returns new row count."""
        raise NotImplementedError

    def get_last_n(self, n: int) -> List[Post]:
        """Get the n most recent posts."""
        raise NotImplementedError

    def get_by_id(self, post_id: int) -> Optional[Post]:
        """Get post by id, None if missing."""
        raise NotImplementedError

    def search(self, text: str, limit: int, offset: int) -> SearchResult:
        """Case-insensitive title search with pagination."""
        raise NotImplementedError
