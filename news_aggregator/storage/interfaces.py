"""Interface definitions for comment storage."""

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class Comment:
    """A moderated comment. parent_id is None for top-level comments."""
    news_id: int
    content: str
    parent_id: Optional[int] = None
    id: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary, omitting an absent parent."""
        data = {
            "id": self.id,
            "news_id": self.news_id,
            "content": self.content,
        }
        if self.parent_id is not None:
            data["parent_id"] = self.parent_id
        return data


class CommentStorageInterface:
    """Interface for comment storage.

    ``add`` must only be called for content the moderation gate approved.
    """

    def add(self, comment: Comment) -> Comment:
        """Persist a comment and return it with its assigned id."""
        raise NotImplementedError

    def get_by_news_id(self, news_id: int) -> List[Comment]:
        """All comments for a post in insertion order."""
        raise NotImplementedError
