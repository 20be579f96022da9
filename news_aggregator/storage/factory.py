"""Factory functions to create storage instances.

The database URL is resolved from the environment:
- DATABASE_URL / COMMENTS_DATABASE_URL (standard for cloud platforms)
- NA_DATABASE_URL / NA_COMMENTS_DATABASE_URL via settings
- SQLite files under data/ for local development

PostgreSQL URLs work with the same SQLAlchemy storage once the ``postgres``
extra (psycopg2) is installed.
"""

import os

import structlog

logger = structlog.get_logger()


def get_database_url(cfg=None) -> str:
    """Get the posts database URL."""
    url = os.environ.get('DATABASE_URL')
    if url:
        return _normalize(url)

    from ..config.settings import settings
    return _normalize((cfg or settings).database_url)


def get_comments_database_url(cfg=None) -> str:
    """Get the comments database URL."""
    url = os.environ.get('COMMENTS_DATABASE_URL')
    if url:
        return _normalize(url)

    from ..config.settings import settings
    return _normalize((cfg or settings).comments_database_url)


def _normalize(url: str) -> str:
    # SQLAlchemy only accepts the postgresql:// scheme
    if url.startswith('postgres://'):
        return 'postgresql://' + url[len('postgres://'):]
    return url


def is_postgres(url: str) -> bool:
    """Check if a URL points at PostgreSQL."""
    return url.startswith('postgresql')


def create_post_storage(url: str = None, cfg=None):
    """Build a PostStorage handle. Callers own and pass it explicitly."""
    from .posts import PostStorage

    url = url or get_database_url(cfg)
    logger.info("post_storage_created", backend="postgres" if is_postgres(url) else "sqlite",
                url=url[:40] + "...")
    return PostStorage(url)


def create_comment_storage(url: str = None, cfg=None):
    """Build a CommentStorage handle. Callers own and pass it explicitly."""
    from .comments import CommentStorage

    url = url or get_comments_database_url(cfg)
    logger.info("comment_storage_created", backend="postgres" if is_postgres(url) else "sqlite",
                url=url[:40] + "...")
    return CommentStorage(url)
