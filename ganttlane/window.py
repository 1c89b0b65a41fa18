# ganttlane/window.py
from __future__ import annotations

import datetime as dt
from typing import Any, Optional, Sequence, Tuple

from .model import SCALES, Task, Window
from .util.console import eprint, obs_enabled
from .util.tz import add_months, local_date, midnight_epoch_ms, monday_of

# Monday of ISO week 1 of 2025 (2024-12-30 .. 2025-01-05).
CUSTOM4WEEK_EPOCH = dt.date(2024, 12, 30)
CUSTOM4WEEK_DAYS = 28

DEFAULT_SCALE = "week"


def normalize_scale(scale: Any) -> str:
    s = str(scale or "").strip().lower()
    if s in SCALES:
        return s
    # Aliases for the 4-week operational period.
    if s in {"p4s", "4week", "custom"}:
        return "custom4week"
    return DEFAULT_SCALE


def coerce_offset(offset: Any) -> int:
    if isinstance(offset, bool):
        return 0
    if isinstance(offset, int):
        return offset
    if isinstance(offset, float) and offset.is_integer():
        return int(offset)
    if isinstance(offset, str):
        try:
            return int(offset.strip())
        except ValueError:
            return 0
    return 0


def reference_instant(tasks: Sequence[Task], now_ms: int) -> int:
    """Earliest task start, or `now_ms` when there are no tasks."""
    if not tasks:
        return int(now_ms)
    return min(t.start_ms for t in tasks)


def quarter_start(d: dt.date) -> dt.date:
    return dt.date(d.year, 3 * ((d.month - 1) // 3) + 1, 1)


def custom4week_base(d: dt.date, epoch: dt.date = CUSTOM4WEEK_EPOCH) -> dt.date:
    """Start of the epoch-aligned 28-day period containing the Monday of `d`."""
    periods = (monday_of(d) - epoch).days // CUSTOM4WEEK_DAYS
    return epoch + dt.timedelta(days=periods * CUSTOM4WEEK_DAYS)


def window_dates(scale: str, offset: int, ref: dt.date) -> Tuple[dt.date, dt.date]:
    """Calendar dates [first, end) of the window, before tz conversion."""
    if scale == "month":
        first = add_months(ref, offset)
        return first, add_months(first, 1)

    if scale == "quarter":
        first = add_months(quarter_start(ref), 3 * offset)
        return first, add_months(first, 3)

    if scale == "custom4week":
        first = custom4week_base(ref) + dt.timedelta(days=7 * offset)
        return first, first + dt.timedelta(days=CUSTOM4WEEK_DAYS)

    first = monday_of(ref) + dt.timedelta(days=7 * offset)
    return first, first + dt.timedelta(days=7)


def compute_window(
    scale: Any,
    offset: Any,
    reference_ms: int,
    tz: dt.tzinfo,
    *,
    pad_days: int = 0,
) -> Window:
    sc = normalize_scale(scale)
    off = coerce_offset(offset)
    ref = local_date(reference_ms, tz)

    try:
        first, end = window_dates(sc, off, ref)
    except (OverflowError, ValueError):
        if obs_enabled():
            eprint(f"[ganttlane.window] WARN: offset {off} out of calendar range for scale={sc}; using 0")
        off = 0
        first, end = window_dates(sc, off, ref)

    min_ms = midnight_epoch_ms(first, tz)
    max_ms = midnight_epoch_ms(end, tz)
    if max_ms <= min_ms:
        max_ms = min_ms + 1

    display_min: Optional[int] = None
    display_max: Optional[int] = None
    pad = max(0, int(pad_days or 0))
    if sc == "custom4week" and pad:
        display_min = midnight_epoch_ms(first - dt.timedelta(days=pad), tz)
        display_max = midnight_epoch_ms(end + dt.timedelta(days=pad), tz)

    return Window(
        min_ms=min_ms,
        max_ms=max_ms,
        scale=sc,
        offset=off,
        display_min_ms=display_min,
        display_max_ms=display_max,
    )


__all__ = [
    "CUSTOM4WEEK_DAYS",
    "CUSTOM4WEEK_EPOCH",
    "DEFAULT_SCALE",
    "coerce_offset",
    "compute_window",
    "custom4week_base",
    "normalize_scale",
    "quarter_start",
    "reference_instant",
    "window_dates",
]
