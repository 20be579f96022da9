"""Database storage and models."""

from .posts import PostStorage
from .comments import CommentStorage
from .interfaces import Comment, CommentStorageInterface
from .models import PostModel, CommentModel, init_db

__all__ = [
    "PostStorage", "CommentStorage", "Comment", "CommentStorageInterface",
    "PostModel", "CommentModel", "init_db",
]
