"""Request correlation identifiers.

A ``CorrelationContext`` is created once per inbound request and handed
explicitly to every function on the request path. Downstream services may
answer with a different ``X-Request-ID``; the gateway adopts that value for the
rest of the request and echoes it back to the client.
"""

import uuid
from dataclasses import dataclass, field
from typing import Mapping, Optional

import structlog

REQUEST_ID_HEADER = "X-Request-ID"

logger = structlog.get_logger()


def new_request_id() -> str:
    return str(uuid.uuid4())


@dataclass
class CorrelationContext:
    """Correlation id for one inbound request."""
    request_id: str = field(default_factory=new_request_id)
    generated: bool = False

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "CorrelationContext":
        """Adopt the inbound header value or mint a fresh id."""
        request_id = (headers.get(REQUEST_ID_HEADER) or "").strip()
        if request_id:
            return cls(request_id=request_id)
        return cls(request_id=new_request_id(), generated=True)

    def adopt(self, request_id: Optional[str]) -> bool:
        """Switch to an id returned by a downstream service.

        Returns True when the id actually changed.
        """
        if not request_id or request_id == self.request_id:
            return False
        logger.info("request_id_adopted", previous=self.request_id, request_id=request_id)
        self.request_id = request_id
        return True

    def headers(self) -> dict:
        return {REQUEST_ID_HEADER: self.request_id}
