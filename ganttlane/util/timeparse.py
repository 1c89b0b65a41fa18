# ganttlane/util/timeparse.py
from __future__ import annotations

import datetime as dt
import math
import re
from typing import Any, Optional

COMPACT_UTC_RE = re.compile(r"^(\d{8})T(\d{6})Z$")  # e.g. 20251217T083000Z

_EPOCH_UTC = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)
_ONE_MS = dt.timedelta(milliseconds=1)

# Instants the calendar code can handle in any timezone, with room for
# windows and ruler buckets on either side: [0002-01-01, 9999-01-01) UTC.
SAFE_MIN_MS = (dt.datetime(2, 1, 1, tzinfo=dt.timezone.utc) - _EPOCH_UTC) // _ONE_MS
SAFE_MAX_MS = (dt.datetime(9999, 1, 1, tzinfo=dt.timezone.utc) - _EPOCH_UTC) // _ONE_MS


def _aware_ms(d: dt.datetime, tz: dt.tzinfo) -> Optional[int]:
    if d.tzinfo is None:
        d = d.replace(tzinfo=tz)
    try:
        return int(d.timestamp() * 1000)
    except (OverflowError, OSError, ValueError):
        return None


def parse_compact_utc(s: str) -> Optional[int]:
    m = COMPACT_UTC_RE.match(s)
    if not m:
        return None
    ymd, hms = m.group(1), m.group(2)
    try:
        aware = dt.datetime(
            int(ymd[0:4]), int(ymd[4:6]), int(ymd[6:8]),
            int(hms[0:2]), int(hms[2:4]), int(hms[4:6]),
            tzinfo=dt.timezone.utc,
        )
    except ValueError:
        return None
    return int(aware.timestamp() * 1000)


def parse_instant_ms(value: Any, tz: dt.tzinfo) -> Optional[int]:
    """Parse a loosely typed start value into epoch ms.

    Accepts datetime (naive values are read in `tz`), date (midnight in `tz`),
    ISO-8601 text, compact UTC text and numeric epoch seconds.
    Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, dt.datetime):
        return _aware_ms(value, tz)

    if isinstance(value, dt.date):
        return _aware_ms(dt.datetime(value.year, value.month, value.day), tz)

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return int(round(float(value) * 1000))
        except OverflowError:
            return None

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        ms = parse_compact_utc(s)
        if ms is not None:
            return ms
        try:
            d = dt.datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            return None
        return _aware_ms(d, tz)

    return None


def format_iso_utc(ms: int) -> str:
    d = _EPOCH_UTC + dt.timedelta(milliseconds=int(ms))
    return d.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def in_calendar_range(start_ms: int, end_ms: int) -> bool:
    return SAFE_MIN_MS <= start_ms and end_ms <= SAFE_MAX_MS
