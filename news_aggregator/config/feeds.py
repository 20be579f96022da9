"""Feed configuration loader."""

import json
from pathlib import Path
from typing import List, Optional

from ..ingestion.interfaces import FeedConfig


def _default_path() -> Path:
    from .settings import settings
    return settings.feeds_path


def load_feeds(config_path: str = None) -> List[FeedConfig]:
    """Load feed configurations from JSON file."""
    if config_path is None:
        config_path = _default_path()

    with open(config_path) as f:
        data = json.load(f)

    feeds = []
    for feed_data in data.get("feeds", []):
        feeds.append(FeedConfig(
            name=feed_data.get("name") or feed_data["url"],
            url=feed_data["url"],
            enabled=feed_data.get("enabled", True),
        ))

    return feeds


def load_request_period(config_path: str = None) -> Optional[float]:
    """Polling period in minutes from the feeds file, if it sets one."""
    if config_path is None:
        config_path = _default_path()

    with open(config_path) as f:
        data = json.load(f)

    period = data.get("settings", {}).get("request_period_minutes")
    return float(period) if period is not None else None
