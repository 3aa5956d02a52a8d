from __future__ import annotations

import time
from datetime import datetime, tzinfo
from typing import Optional

MS_PER_SECOND = 1000
SECONDS_PER_HOUR = 3600
MS_PER_HOUR = SECONDS_PER_HOUR * MS_PER_SECOND
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR
MS_PER_DAY = SECONDS_PER_DAY * MS_PER_SECOND


def now_millis() -> int:
    return int(time.time() * MS_PER_SECOND)


def seconds_from_midnight(timestamp_ms: Optional[int] = None, tz: Optional[tzinfo] = None) -> int:
    """
    Project an instant onto its local time-of-day.

    Args:
        timestamp_ms: Epoch milliseconds. ``None`` means now.
        tz: Zone used for the projection. ``None`` uses the host's local zone.

    Returns:
        int: Seconds elapsed since local midnight, in ``[0, 86400)``.
    """
    if timestamp_ms is None:
        timestamp_ms = now_millis()
    if tz is None:
        moment = datetime.fromtimestamp(timestamp_ms / MS_PER_SECOND).astimezone()
    else:
        moment = datetime.fromtimestamp(timestamp_ms / MS_PER_SECOND, tz)
    return moment.hour * SECONDS_PER_HOUR + moment.minute * 60 + moment.second


def local_utc_offset_millis(timestamp_ms: Optional[int] = None) -> int:
    if timestamp_ms is None:
        timestamp_ms = now_millis()
    offset = datetime.fromtimestamp(timestamp_ms / MS_PER_SECOND).astimezone().utcoffset()
    return int(offset.total_seconds() * MS_PER_SECOND) if offset is not None else 0


def timezone_id_by_offset(utc_offset_ms: int) -> str:
    """Best-effort zone id for a fixed UTC offset."""
    if utc_offset_ms == 0:
        return "UTC"
    if utc_offset_ms % MS_PER_HOUR == 0:
        hours = utc_offset_ms // MS_PER_HOUR
        # Etc/GMT ids carry the inverted sign.
        return f"Etc/GMT{-hours:+d}"
    sign = "+" if utc_offset_ms > 0 else "-"
    minutes = abs(utc_offset_ms) // (60 * MS_PER_SECOND)
    return f"GMT{sign}{minutes // 60:02d}:{minutes % 60:02d}"
