"""HTTP-date formatting and parsing.

Both directions go through :mod:`email.utils`, which uses fixed English
weekday and month names and keeps no state between calls, so the functions
are safe to call from any worker thread.
"""

import math
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Optional


class HttpDateError(ValueError):
    """Raised when a header value is not a valid HTTP-date."""


def format_http_date(moment: Optional[datetime] = None) -> str:
    """Format ``moment`` (default: now) as ``Sun, 06 Nov 1994 08:49:37 GMT``."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def parse_http_date(value: str) -> datetime:
    """Parse an HTTP-date into an aware UTC datetime.

    Values carrying no zone information are interpreted as UTC.
    """
    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError, OverflowError) as exc:
        raise HttpDateError(f"Invalid HTTP-date: {value!r}") from exc
    if parsed is None:
        raise HttpDateError(f"Invalid HTTP-date: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_epoch_seconds(moment: datetime) -> int:
    """Floor a datetime to whole seconds since the epoch."""
    return math.floor(moment.timestamp())
