"""Data ingestion - fetching and parsing RSS feeds."""

from .interfaces import FeedConfig, FeedItem, Post, SearchResult, FetchReport, FetcherInterface, StorageInterface
from .fetcher import RSSFetcher
from .timeparse import parse_pub_date, format_pub_date

__all__ = [
    "FeedConfig", "FeedItem", "Post", "SearchResult", "FetchReport",
    "FetcherInterface", "StorageInterface", "RSSFetcher",
    "parse_pub_date", "format_pub_date",
]
