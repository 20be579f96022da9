"""Publication date parsing for feed items.

Feeds publish dates in a handful of textual formats. Each known format is tried
in a fixed order and the first one that parses wins.
"""

from datetime import datetime, timedelta, timezone

from ..errors import MalformedTimestamp

RFC1123Z = "%a, %d %b %Y %H:%M:%S %z"
RFC1123_NO_ZONE = "%a, %d %b %Y %H:%M:%S"
RFC1123Z_NO_SECONDS = "%a, %d %b %Y %H:%M %z"
ISO8601 = "%Y-%m-%dT%H:%M:%S%z"
ISO8601_FRACTION = "%Y-%m-%dT%H:%M:%S.%f%z"

# Named zones seen in RSS feeds; anything else is read as UTC
ZONE_OFFSETS = {
    "UT": 0, "UTC": 0, "GMT": 0, "Z": 0,
    "EST": -5, "EDT": -4,
    "CST": -6, "CDT": -5,
    "MST": -7, "MDT": -6,
    "PST": -8, "PDT": -7,
}


def _parse_numeric_zone(text: str) -> datetime:
    return datetime.strptime(text, RFC1123Z)


def _parse_named_zone(text: str) -> datetime:
    stamp, _, zone = text.rpartition(" ")
    if not stamp or not zone.isalpha():
        raise ValueError(f"no zone name in {text!r}")
    parsed = datetime.strptime(stamp, RFC1123_NO_ZONE)
    offset = ZONE_OFFSETS.get(zone.upper(), 0)
    return parsed.replace(tzinfo=timezone(timedelta(hours=offset)))


def _parse_no_seconds(text: str) -> datetime:
    return datetime.strptime(text, RFC1123Z_NO_SECONDS)


def _parse_iso(text: str) -> datetime:
    fmt = ISO8601_FRACTION if "." in text else ISO8601
    return datetime.strptime(text, fmt)


PARSERS = (
    _parse_numeric_zone,
    _parse_named_zone,
    _parse_no_seconds,
    _parse_iso,
)


def parse_pub_date(value: str) -> datetime:
    """Parse a feed publication date into an aware UTC datetime."""
    text = (value or "").strip()
    if text:
        for parser in PARSERS:
            try:
                parsed = parser(text)
            except ValueError:
                continue
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
    raise MalformedTimestamp(value)


def to_unix(dt: datetime) -> int:
    return int(dt.timestamp())


def from_unix(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def format_pub_date(dt: datetime) -> str:
    """Render as RFC 1123 with a numeric zone."""
    return dt.strftime(RFC1123Z)
