"""Database operations for comment storage."""

from dataclasses import replace
from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
import structlog

from .interfaces import Comment, CommentStorageInterface
from .models import CommentModel, init_db
from .posts import ensure_sqlite_dir
from ..errors import ReferentialError, StoreError

logger = structlog.get_logger()


class CommentStorage(CommentStorageInterface):
    """SQL storage for threaded comments."""

    def __init__(self, database_url: str = None):
        if database_url is None:
            from ..config.settings import settings
            database_url = settings.comments_database_url

        ensure_sqlite_dir(database_url)

        self.engine = init_db(database_url, tables=[CommentModel.__table__])
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

    def close(self) -> None:
        self.engine.dispose()

    def add(self, comment: Comment) -> Comment:
        """Save comment, return a copy carrying the new id."""
        session = self.Session()
        try:
            model = CommentModel(
                news_id=comment.news_id,
                parent_id=comment.parent_id,
                content=comment.content,
            )
            session.add(model)
            session.commit()
            logger.debug("comment_saved", id=model.id, news_id=comment.news_id)
            return replace(comment, id=model.id)
        except IntegrityError as e:
            session.rollback()
            logger.info("comment_rejected_by_store", news_id=comment.news_id,
                        parent_id=comment.parent_id)
            raise ReferentialError(
                f"parent comment {comment.parent_id} does not exist"
            ) from e
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(f"could not save comment: {e}") from e
        finally:
            session.close()

    def get_by_news_id(self, news_id: int) -> List[Comment]:
        """Get all comments for a post, oldest first."""
        session = self.Session()
        try:
            models = session.query(CommentModel)\
                .filter(CommentModel.news_id == news_id)\
                .order_by(CommentModel.id)\
                .all()
            return [self._model_to_comment(m) for m in models]
        except SQLAlchemyError as e:
            raise StoreError(f"could not get comments: {e}") from e
        finally:
            session.close()

    def _model_to_comment(self, model: CommentModel) -> Comment:
        return Comment(
            id=model.id,
            news_id=model.news_id,
            parent_id=model.parent_id,
            content=model.content,
        )
