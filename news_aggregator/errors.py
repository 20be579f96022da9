"""Error types shared by the stores, the moderation gate and the HTTP services."""


class NewsAggregatorError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(NewsAggregatorError):
    """Malformed or missing caller input. Surfaced as a client error."""


class NotFound(NewsAggregatorError):
    """A point lookup found nothing."""


class UpstreamUnavailable(NewsAggregatorError):
    """A downstream service could not be reached."""

    def __init__(self, service: str, reason: str = ""):
        self.service = service
        self.reason = reason
        message = f"{service} unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MalformedTimestamp(NewsAggregatorError):
    """A publication date matched none of the known formats."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"could not parse publication time: {value!r}")


class ModerationRejected(NewsAggregatorError):
    """Content was declined by the moderation gate."""


class StoreError(NewsAggregatorError):
    """The persistence layer failed."""


class ReferentialError(StoreError):
    """A write referenced a row that does not exist."""
