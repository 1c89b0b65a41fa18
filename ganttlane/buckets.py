# ganttlane/buckets.py
from __future__ import annotations

import datetime as dt
from typing import List, Optional, Tuple

from .model import Bucket, RulerRow, Window
from .util.tz import add_months, iso_week_number, local_date, local_epoch_ms, midnight_epoch_ms, monday_of

WEEKDAY_ABBR = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# (slot, label, start hour, end hour); an end hour <= start hour ends on the next day.
DAY_SLOTS: Tuple[Tuple[str, str, int, int], ...] = (
    ("morning", "Morning", 8, 14),
    ("afternoon", "Afternoon", 14, 20),
    ("night", "Night", 20, 8),
)

_ONE_DAY = dt.timedelta(days=1)


def clamp_day_start_hour(hour: object) -> int:
    try:
        h = int(hour)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return 0
    return max(0, min(23, h))


def _clipped(
    window: Window,
    start_ms: int,
    end_ms: int,
    label: str,
    *,
    date_ms: Optional[int] = None,
    slot: Optional[str] = None,
) -> Optional[Bucket]:
    lo = max(start_ms, window.min_ms)
    hi = min(end_ms, window.max_ms)
    if hi <= lo:
        return None
    left, width = window.percent_of(lo, hi)
    return Bucket(
        start_ms=lo,
        end_ms=hi,
        left_percent=left,
        width_percent=width,
        label=label,
        date_ms=date_ms,
        slot=slot,
    )


def week_buckets(window: Window, tz: dt.tzinfo) -> List[Bucket]:
    out: List[Bucket] = []
    monday = monday_of(local_date(window.min_ms, tz))
    start = midnight_epoch_ms(monday, tz)
    while start < window.max_ms:
        nxt = monday + dt.timedelta(days=7)
        end = midnight_epoch_ms(nxt, tz)
        b = _clipped(window, start, end, f"W{iso_week_number(monday)}", date_ms=start)
        if b is not None:
            out.append(b)
        monday, start = nxt, end
    return out


def day_buckets(window: Window, tz: dt.tzinfo, *, day_start_hour: int = 0, with_weekday: bool = True) -> List[Bucket]:
    """One bucket per day, boundaries at `day_start_hour`.

    Starts from the day before the window so the leading hours before the
    first boundary are still covered.
    """
    h = clamp_day_start_hour(day_start_hour)
    out: List[Bucket] = []
    d = local_date(window.min_ms, tz) - _ONE_DAY
    start = local_epoch_ms(d, tz, h)
    while start < window.max_ms:
        nxt = d + _ONE_DAY
        end = local_epoch_ms(nxt, tz, h)
        label = f"{WEEKDAY_ABBR[d.weekday()]} {d.day:02d}" if with_weekday else f"{d.day:02d}"
        b = _clipped(window, start, end, label, date_ms=start)
        if b is not None:
            out.append(b)
        d, start = nxt, end
    return out


def slot_buckets(window: Window, tz: dt.tzinfo) -> List[Bucket]:
    """Morning/afternoon/night slots; the night slot runs into the next morning."""
    out: List[Bucket] = []
    d = local_date(window.min_ms, tz) - _ONE_DAY
    while midnight_epoch_ms(d, tz) < window.max_ms:
        for slot, label, h0, h1 in DAY_SLOTS:
            start = local_epoch_ms(d, tz, h0)
            end = local_epoch_ms(d + _ONE_DAY if h1 <= h0 else d, tz, h1)
            b = _clipped(window, start, end, label, date_ms=start, slot=slot)
            if b is not None:
                out.append(b)
        d += _ONE_DAY
    return out


def month_buckets(window: Window, tz: dt.tzinfo, *, with_year: bool = True) -> List[Bucket]:
    out: List[Bucket] = []
    first = local_date(window.min_ms, tz).replace(day=1)
    start = midnight_epoch_ms(first, tz)
    while start < window.max_ms:
        nxt = add_months(first, 1)
        end = midnight_epoch_ms(nxt, tz)
        label = MONTH_ABBR[first.month - 1]
        if with_year:
            label = f"{label} {first.year % 100:02d}"
        b = _clipped(window, start, end, label, date_ms=start)
        if b is not None:
            out.append(b)
        first, start = nxt, end
    return out


def generate_ruler(window: Window, tz: dt.tzinfo, *, day_start_hour: int = 0) -> Tuple[RulerRow, ...]:
    """Stacked ruler rows for the window's scale, top row first."""
    if window.scale == "month":
        return (
            RulerRow("month", tuple(month_buckets(window, tz))),
            RulerRow("week", tuple(week_buckets(window, tz))),
            RulerRow("day", tuple(day_buckets(window, tz, with_weekday=False))),
        )
    if window.scale == "quarter":
        return (
            RulerRow("month", tuple(month_buckets(window, tz, with_year=False))),
            RulerRow("week", tuple(week_buckets(window, tz))),
        )
    return (
        RulerRow("week", tuple(week_buckets(window, tz))),
        RulerRow("day", tuple(day_buckets(window, tz, day_start_hour=day_start_hour))),
        RulerRow("slot", tuple(slot_buckets(window, tz))),
    )


__all__ = [
    "DAY_SLOTS",
    "MONTH_ABBR",
    "WEEKDAY_ABBR",
    "clamp_day_start_hour",
    "day_buckets",
    "generate_ruler",
    "month_buckets",
    "slot_buckets",
    "week_buckets",
]
