"""Settings, feed list and logging setup."""

from .settings import Settings, settings
from .feeds import load_feeds, load_request_period
from .logging import configure_logging

__all__ = ["Settings", "settings", "load_feeds", "load_request_period", "configure_logging"]
