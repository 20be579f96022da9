"""Synchronous moderation check in front of comment writes."""

import asyncio
from enum import Enum
from typing import Optional

import aiohttp
import structlog

from ..config.settings import settings
from ..correlation import CorrelationContext

logger = structlog.get_logger()


class Verdict(Enum):
    """Outcome of a moderation check."""
    APPROVED = "approved"
    REJECTED = "rejected"
    SERVICE_UNAVAILABLE = "service_unavailable"

    @property
    def approved(self) -> bool:
        return self is Verdict.APPROVED


class ModerationGate:
    """Asks the moderation service whether text may be stored.

    Only an explicit 2xx answer approves. Every verdict is fetched fresh.
    """

    def __init__(self, url: str = None, timeout_seconds: float = None):
        self.url = url or settings.moderation_service_url
        self.timeout_seconds = timeout_seconds or settings.moderation_timeout_seconds
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

    async def check(self, content: str, correlation: CorrelationContext) -> Verdict:
        """Check content against the moderation service."""
        log = logger.bind(request_id=correlation.request_id)
        session = await self._get_session()

        try:
            async with session.post(
                self.url,
                json={"text": content},
                headers=correlation.headers(),
            ) as resp:
                if 200 <= resp.status < 300:
                    log.info("moderation_approved")
                    return Verdict.APPROVED

                body = await resp.text()
                log.info("moderation_rejected", status=resp.status, reason=body[:200])
                return Verdict.REJECTED
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error("moderation_unavailable", url=self.url,
                      error=str(e) or type(e).__name__)
            return Verdict.SERVICE_UNAVAILABLE
