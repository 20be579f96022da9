"""News service: query API over the post store, plus the ingestion loop."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Path, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
import structlog

from .common import get_correlation, install_request_middleware, parse_int_param
from ..errors import NotFound, StoreError
from ..ingestion.interfaces import StorageInterface
from ..pipeline.scheduler import IngestionScheduler

logger = structlog.get_logger()


def parse_page(value: Optional[str]) -> int:
    """Page numbers below 1 or not numeric fall back to the first page."""
    try:
        page = int(value) if value else 1
    except ValueError:
        return 1
    return page if page > 0 else 1


def create_app(
    storage: StorageInterface,
    scheduler: IngestionScheduler = None,
    items_per_page: int = None,
) -> FastAPI:
    """Build the news FastAPI app around an explicitly passed store."""
    if items_per_page is None:
        from ..config.settings import settings
        items_per_page = settings.items_per_page

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if scheduler is not None:
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None:
                await scheduler.shutdown()

    app = FastAPI(title="News Service", lifespan=lifespan)
    install_request_middleware(app, service="news")

    @app.get("/health")
    async def health_check():
        """Health check endpoint for load balancers."""
        try:
            stats = await run_in_threadpool(storage.get_stats)
            return {
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "database": "connected",
                "posts": stats.get("total_posts", 0),
                "ingestion": bool(scheduler and scheduler.running),
            }
        except StoreError as e:
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "error": str(e)}
            )

    @app.get("/news/details")
    async def news_details(request: Request, id: Optional[str] = None):
        """Single post by id."""
        log = logger.bind(request_id=get_correlation(request).request_id)
        post_id = parse_int_param(id, "id")

        post = await run_in_threadpool(storage.get_by_id, post_id)
        if post is None:
            log.info("post_not_found", id=post_id)
            raise NotFound("Post not found")
        return post.to_dict()

    @app.get("/news/{n}")
    async def last_news(request: Request, n: int = Path(..., ge=0)):
        """The n most recent posts."""
        log = logger.bind(request_id=get_correlation(request).request_id)
        posts = await run_in_threadpool(storage.get_last_n, n)
        log.info("last_posts_served", n=n, returned=len(posts))
        return [p.to_dict() for p in posts]

    @app.get("/news")
    async def search_news(request: Request, s: str = "", page: Optional[str] = None):
        """Title search, paginated."""
        log = logger.bind(request_id=get_correlation(request).request_id)
        current_page = parse_page(page)
        offset = (current_page - 1) * items_per_page

        result = await run_in_threadpool(storage.search, s, items_per_page, offset)
        total_pages = result.total_pages(items_per_page)
        log.info("search_served", query=s, page=current_page,
                 total_pages=total_pages, returned=len(result.items))

        return {
            "posts": [p.to_dict() for p in result.items],
            "pagination": {
                "current_page": current_page,
                "total_pages": total_pages,
                "items_per_page": items_per_page,
                "total_matches": result.total_matches,
            },
        }

    return app
