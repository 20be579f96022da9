"""API gateway: the single entry point for clients."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
import structlog

from .aggregator import DownstreamResponse, RequestAggregator
from ..api.common import get_correlation, install_request_middleware
from ..errors import ValidationError

logger = structlog.get_logger()


def relay(result: DownstreamResponse) -> Response:
    """Return a downstream status and body unchanged."""
    return Response(content=result.body, status_code=result.status,
                    media_type=result.content_type)


def require(value: Optional[str], name: str) -> str:
    if not value:
        raise ValidationError(f"Missing '{name}' parameter")
    return value


def create_app(aggregator: RequestAggregator) -> FastAPI:
    """Build the gateway FastAPI app around an explicitly passed aggregator."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await aggregator.close()

    app = FastAPI(title="News Gateway", lifespan=lifespan)
    install_request_middleware(app, service="gateway")

    @app.get("/news")
    async def search_news(request: Request, s: str = "", page: str = "1"):
        """Search posts by title."""
        correlation = get_correlation(request)
        return relay(await aggregator.search_news(correlation, s, page or "1"))

    @app.get("/news/last")
    async def last_news(request: Request, n: Optional[str] = None):
        """The n most recent posts."""
        correlation = get_correlation(request)
        n = require(n, "n")
        logger.info("fetching_last_posts", request_id=correlation.request_id, n=n)
        return relay(await aggregator.last_news(correlation, n))

    @app.get("/news/details")
    async def news_details(request: Request, id: Optional[str] = None):
        """Post details together with its comments."""
        correlation = get_correlation(request)
        news_id = require(id, "id")
        return relay(await aggregator.news_details(correlation, news_id))

    @app.get("/news/comments")
    async def news_comments(request: Request, news_id: Optional[str] = None):
        """Comments of a post."""
        correlation = get_correlation(request)
        news_id = require(news_id, "news_id")
        return relay(await aggregator.comments(correlation, news_id))

    @app.post("/news/comments/add")
    async def add_comment(request: Request):
        """Forward a new comment to the comments service verbatim."""
        correlation = get_correlation(request)
        body = await request.body()
        return relay(await aggregator.add_comment(correlation, body))

    return app
