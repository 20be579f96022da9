"""Fan-out/fan-in over the news and comments services.

Payloads are relayed as opaque bytes. The only thing the aggregator reads from a
downstream response is its status and its ``X-Request-ID`` header.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import aiohttp
import structlog

from ..config.settings import settings
from ..correlation import REQUEST_ID_HEADER, CorrelationContext
from ..errors import UpstreamUnavailable

logger = structlog.get_logger()

JSON_CONTENT_TYPE = "application/json"


@dataclass
class DownstreamResponse:
    """Status and raw body of one downstream call."""
    status: int
    body: bytes
    content_type: str = JSON_CONTENT_TYPE

    @property
    def ok(self) -> bool:
        return self.status == 200


def compose_details(news: DownstreamResponse, comments: DownstreamResponse) -> DownstreamResponse:
    """Wrap two JSON payloads into one envelope without parsing them."""
    body = b'{"news":' + (news.body.strip() or b"null") \
        + b',"comments":' + (comments.body.strip() or b"null") + b"}"
    return DownstreamResponse(status=200, body=body)


class RequestAggregator:
    """Issues downstream calls on behalf of one inbound request at a time."""

    def __init__(
        self,
        news_url: str = None,
        comments_url: str = None,
        timeout_seconds: float = None,
    ):
        self.news_url = (news_url or settings.news_service_url).rstrip("/")
        self.comments_url = (comments_url or settings.comments_service_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.downstream_timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            )
        return self._session

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def forward(
        self,
        correlation: CorrelationContext,
        service: str,
        method: str,
        url: str,
        params: dict = None,
        body: bytes = None,
    ) -> DownstreamResponse:
        """Make one downstream call carrying the correlation id.

        A different ``X-Request-ID`` in the response replaces the id for the
        rest of the request.
        """
        log = logger.bind(request_id=correlation.request_id, service=service)
        session = await self._get_session()
        headers = correlation.headers()
        if body is not None:
            headers["Content-Type"] = JSON_CONTENT_TYPE

        try:
            async with session.request(method, url, params=params, data=body,
                                       headers=headers) as resp:
                payload = await resp.read()
                returned_id = resp.headers.get(REQUEST_ID_HEADER)
                content_type = resp.headers.get("Content-Type", JSON_CONTENT_TYPE)
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error("downstream_unavailable", method=method, url=url,
                      error=str(e) or type(e).__name__)
            raise UpstreamUnavailable(service, str(e) or type(e).__name__) from e

        correlation.adopt(returned_id)
        logger.info("downstream_completed", request_id=correlation.request_id,
                    service=service, method=method, url=url, status=status)
        return DownstreamResponse(status=status, body=payload, content_type=content_type)

    async def last_news(self, correlation: CorrelationContext, n: str) -> DownstreamResponse:
        return await self.forward(correlation, "news", "GET", f"{self.news_url}/news/{n}")

    async def search_news(self, correlation: CorrelationContext, query: str,
                          page: str) -> DownstreamResponse:
        return await self.forward(correlation, "news", "GET", f"{self.news_url}/news",
                                  params={"s": query, "page": page})

    async def comments(self, correlation: CorrelationContext, news_id: str) -> DownstreamResponse:
        return await self.forward(correlation, "comments", "GET", f"{self.comments_url}/comments",
                                  params={"news_id": news_id})

    async def add_comment(self, correlation: CorrelationContext, body: bytes) -> DownstreamResponse:
        return await self.forward(correlation, "comments", "POST", f"{self.comments_url}/comments",
                                  body=body)

    async def news_details(self, correlation: CorrelationContext, news_id: str) -> DownstreamResponse:
        """Post details plus its comments in one envelope.

        A failed post lookup is returned as is and the comments service is not
        called. A failed comments call fails the whole request.
        """
        log = logger.bind(news_id=news_id)

        news = await self.forward(correlation, "news", "GET", f"{self.news_url}/news/details",
                                  params={"id": news_id})
        if not news.ok:
            log.info("details_aborted", request_id=correlation.request_id,
                     stage="news", status=news.status)
            return news

        comments = await self.comments(correlation, news_id)
        if not comments.ok:
            log.info("details_aborted", request_id=correlation.request_id,
                     stage="comments", status=comments.status)
            return comments

        log.info("details_composed", request_id=correlation.request_id)
        return compose_details(news, comments)
