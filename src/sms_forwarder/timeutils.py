"""Timestamp formatting and time-window resolution."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo

from .constants import TIMESTAMP_FORMAT
from .models import TimeFilter

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_timestamp(timestamp: int, tz: tzinfo | None = None) -> str:
    """Format epoch milliseconds as "dd MMM yyyy HH:mm".

    Uses the local time zone unless *tz* is given.
    """
    moment = _EPOCH + timedelta(milliseconds=timestamp)
    return moment.astimezone(tz).strftime(TIMESTAMP_FORMAT)


def _to_epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def start_time_for_filter(time_filter: TimeFilter, now: datetime | None = None) -> int:
    """Return the lower-bound timestamp (epoch ms) for a named time window.

    *now* is a naive local datetime and defaults to the current time.
    Windows have no upper bound: YESTERDAY and LAST_MONTH run through now.
    """
    now = now or datetime.now()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if time_filter is TimeFilter.TODAY:
        start = midnight
    elif time_filter is TimeFilter.YESTERDAY:
        start = midnight - timedelta(days=1)
    elif time_filter is TimeFilter.LAST_7_DAYS:
        start = midnight - timedelta(days=7)
    elif time_filter is TimeFilter.THIS_MONTH:
        start = midnight.replace(day=1)
    elif time_filter is TimeFilter.LAST_MONTH:
        first = midnight.replace(day=1)
        if first.month == 1:
            start = first.replace(year=first.year - 1, month=12)
        else:
            start = first.replace(month=first.month - 1)
    else:
        raise ValueError(f"Unknown time filter: {time_filter!r}")

    return _to_epoch_ms(start)
