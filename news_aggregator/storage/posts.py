"""Database operations for post storage."""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
import structlog

from .models import PostModel, init_db
from ..errors import MalformedTimestamp, StoreError, ValidationError
from ..ingestion.interfaces import FeedItem, Post, SearchResult, StorageInterface
from ..ingestion.timeparse import from_unix, parse_pub_date, to_unix

logger = structlog.get_logger()

# Bound on bind parameters per IN (...) lookup
LINK_LOOKUP_CHUNK = 500

# INSERT .. ON CONFLICT DO NOTHING per supported backend
DIALECT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


def ensure_sqlite_dir(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        db_path = database_url.replace("sqlite:///", "")
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)


class PostStorage(StorageInterface):
    """SQL storage for posts.

    One instance owns an engine and its connection pool and is safe to share
    between the ingestion scheduler and concurrent request handlers.
    """

    def __init__(self, database_url: str = None):
        if database_url is None:
            from ..config.settings import settings
            database_url = settings.database_url

        ensure_sqlite_dir(database_url)

        self.engine = init_db(database_url, tables=[PostModel.__table__])
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

    def close(self) -> None:
        self.engine.dispose()

    def save_batch(self, items: Sequence[FeedItem]) -> int:
        """Save a batch in one transaction, return count of new posts.

        Items whose link is already stored, or repeated within the batch, are
        skipped. Items with an unparseable date are logged and skipped. The
        unique link constraint is the final guard, so a link stored by another
        writer mid-batch is skipped too. Any other failure rolls back the whole
        batch.
        """
        rows = self._prepare(items)
        if not rows:
            logger.info("posts_saved", count=0, total=len(items))
            return 0

        insert = DIALECT_INSERTS.get(self.engine.dialect.name, sqlite_insert)
        session = self.Session()
        try:
            existing = self._existing_links(session, [r["link"] for r in rows])
            saved = 0
            for row in rows:
                if row["link"] in existing:
                    continue
                stmt = insert(PostModel)\
                    .values(**row)\
                    .on_conflict_do_nothing(index_elements=["link"])
                saved += session.execute(stmt).rowcount
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("post_batch_failed", total=len(items), error=str(e))
            raise StoreError(f"could not save posts: {e}") from e
        finally:
            session.close()

        logger.info(
            "posts_saved",
            count=saved,
            duplicates=len(rows) - saved,
            total=len(items)
        )
        return saved

    def _prepare(self, items: Iterable[FeedItem]) -> List[dict]:
        """Parse dates and drop in-batch duplicates. First occurrence wins."""
        rows = []
        seen_links = set()
        for item in items:
            if not item.link:
                logger.warning("post_skipped", reason="missing_link", title=item.title[:50])
                continue
            if item.link in seen_links:
                logger.debug("post_duplicate_in_batch", link=item.link[:80])
                continue
            try:
                published_at = parse_pub_date(item.pub_date)
            except MalformedTimestamp as e:
                logger.warning("post_skipped", reason="malformed_timestamp",
                               link=item.link[:80], pub_date=e.value)
                continue
            seen_links.add(item.link)
            rows.append({
                "title": item.title or "",
                "content": item.content or "",
                "pub_time": to_unix(published_at),
                "link": item.link,
            })
        return rows

    def _existing_links(self, session, links: List[str]) -> set:
        found = set()
        for start in range(0, len(links), LINK_LOOKUP_CHUNK):
            chunk = links[start:start + LINK_LOOKUP_CHUNK]
            rows = session.query(PostModel.link)\
                .filter(PostModel.link.in_(chunk))\
                .all()
            found.update(row.link for row in rows)
        return found

    def get_last_n(self, n: int) -> List[Post]:
        """Get the n newest posts by publication time."""
        if n < 0:
            raise ValidationError("n must be non-negative")
        if n == 0:
            return []

        session = self.Session()
        try:
            models = session.query(PostModel)\
                .order_by(PostModel.pub_time.desc(), PostModel.id.desc())\
                .limit(n)\
                .all()
            return [self._model_to_post(m) for m in models]
        except SQLAlchemyError as e:
            raise StoreError(f"could not get posts: {e}") from e
        finally:
            session.close()

    def get_by_id(self, post_id: int) -> Optional[Post]:
        """Get post by id, None if it does not exist."""
        session = self.Session()
        try:
            model = session.get(PostModel, post_id)
            return self._model_to_post(model) if model else None
        except SQLAlchemyError as e:
            raise StoreError(f"could not get post: {e}") from e
        finally:
            session.close()

    def search(self, text: str, limit: int, offset: int) -> SearchResult:
        """Search titles case-insensitively. Empty text matches everything."""
        if limit <= 0:
            raise ValidationError("limit must be positive")
        if offset < 0:
            raise ValidationError("offset must be non-negative")

        predicate = PostModel.title.icontains(text or "", autoescape=True)

        session = self.Session()
        try:
            total = session.query(PostModel)\
                .filter(predicate)\
                .count()
            models = session.query(PostModel)\
                .filter(predicate)\
                .order_by(PostModel.pub_time.desc(), PostModel.id.desc())\
                .limit(limit)\
                .offset(offset)\
                .all()
            return SearchResult(
                items=[self._model_to_post(m) for m in models],
                total_matches=total,
            )
        except SQLAlchemyError as e:
            raise StoreError(f"could not search posts: {e}") from e
        finally:
            session.close()

    def count(self) -> int:
        session = self.Session()
        try:
            return session.query(PostModel).count()
        except SQLAlchemyError as e:
            raise StoreError(f"could not count posts: {e}") from e
        finally:
            session.close()

    def get_stats(self) -> dict:
        """Get database statistics."""
        session = self.Session()
        try:
            total = session.query(PostModel).count()
            newest = session.query(PostModel.pub_time)\
                .order_by(PostModel.pub_time.desc())\
                .first()
            return {
                "total_posts": total,
                "newest_pub_time": newest.pub_time if newest else None,
            }
        except SQLAlchemyError as e:
            raise StoreError(f"could not read stats: {e}") from e
        finally:
            session.close()

    def _model_to_post(self, model: PostModel) -> Post:
        """Convert database model to Post."""
        return Post(
            id=model.id,
            title=model.title,
            content=model.content,
            published_at=from_unix(model.pub_time),
            link=model.link,
        )
