"""Comments service: moderated writes and per-post listing."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
import structlog

from .common import get_correlation, install_request_middleware, parse_int_param
from ..errors import ModerationRejected, UpstreamUnavailable
from ..moderation.gate import ModerationGate, Verdict
from ..storage.interfaces import Comment, CommentStorageInterface

logger = structlog.get_logger()


class CommentIn(BaseModel):
    """Body of POST /comments."""
    news_id: int
    parent_id: Optional[int] = None
    # Empty comments are refused before moderation is asked
    content: str = Field(..., min_length=1)


def create_app(storage: CommentStorageInterface, gate: ModerationGate) -> FastAPI:
    """Build the comments FastAPI app around an explicitly passed store and gate."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await gate.close()

    app = FastAPI(title="Comments Service", lifespan=lifespan)
    install_request_middleware(app, service="comments")

    @app.post("/comments")
    async def add_comment(request: Request, body: CommentIn):
        """Store a comment once moderation approved its content."""
        correlation = get_correlation(request)
        log = logger.bind(request_id=correlation.request_id)

        verdict = await gate.check(body.content, correlation)
        if verdict is Verdict.SERVICE_UNAVAILABLE:
            raise UpstreamUnavailable("moderation service")
        if not verdict.approved:
            raise ModerationRejected("Comment rejected by moderation service")

        comment = Comment(news_id=body.news_id, parent_id=body.parent_id, content=body.content)
        saved = await run_in_threadpool(storage.add, comment)
        log.info("comment_added", id=saved.id, news_id=saved.news_id, parent_id=saved.parent_id)
        return saved.to_dict()

    @app.get("/comments")
    async def list_comments(request: Request, news_id: Optional[str] = None):
        """All comments of a post in insertion order."""
        log = logger.bind(request_id=get_correlation(request).request_id)
        news_id_value = parse_int_param(news_id, "news_id")

        comments = await run_in_threadpool(storage.get_by_news_id, news_id_value)
        log.info("comments_served", news_id=news_id_value, count=len(comments))
        return [c.to_dict() for c in comments]

    return app
