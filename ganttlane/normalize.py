# ganttlane/normalize.py
from __future__ import annotations

import datetime as dt
import math
import re
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from .model import HOUR_MS, Dropped, Normalized, Task
from .util.console import eprint, obs_enabled
from .util.sanitize import COMMENT_MAX, GROUP_KEY_MAX, NAME_MAX, sanitize_color, sanitize_text
from .util.timeparse import in_calendar_range, parse_instant_ms

MIN_DURATION_HOURS = 0.1
MAX_DURATION_HOURS = 1000.0

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
_INT_RE = re.compile(r"^-?\d+$")

Outcome = Union[Normalized, Dropped]


def clamp_duration_hours(value: float) -> float:
    return max(MIN_DURATION_HOURS, min(MAX_DURATION_HOURS, float(value)))


def parse_duration_hours(value: Any) -> Optional[float]:
    """Numeric hours, or None when the value is absent/non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        f = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(f):
        return None
    return clamp_duration_hours(f)


def parse_tristate(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        low = value.strip().lower()
        if low in _TRUE:
            return True
        if low in _FALSE:
            return False
    return None


def parse_totals(value: Any) -> Tuple[Tuple[str, float], ...]:
    """(column, value) pairs from a mapping of total columns.

    Non-numeric or non-finite values are skipped; numeric text is accepted.
    """
    if not isinstance(value, Mapping):
        return ()
    out: List[Tuple[str, float]] = []
    for col, raw in value.items():
        if not isinstance(col, str) or raw is None or isinstance(raw, bool):
            continue
        if not isinstance(raw, (int, float, str)):
            continue
        try:
            f = float(raw.strip() if isinstance(raw, str) else raw)
        except (ValueError, OverflowError):
            continue
        if math.isfinite(f):
            out.append((col, f))
    return tuple(out)


def _task_id(value: Any, index: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and _INT_RE.match(value.strip()):
        return int(value.strip())
    # Positional ids are negative so they never collide with host row ids.
    return -(index + 1)


def normalize_record(record: Any, index: int, tz: dt.tzinfo) -> Outcome:
    if not isinstance(record, Mapping):
        return Dropped(index=index, reason="not_a_mapping")

    start_raw = record.get("start")
    if start_raw is None or (isinstance(start_raw, str) and not start_raw.strip()):
        return Dropped(index=index, reason="missing_start")
    start_ms = parse_instant_ms(start_raw, tz)
    if start_ms is None:
        return Dropped(index=index, reason="invalid_start")

    dur_raw = record.get("duration")
    if dur_raw is None:
        return Dropped(index=index, reason="missing_duration")
    hours = parse_duration_hours(dur_raw)
    if hours is None:
        return Dropped(index=index, reason="invalid_duration")
    # The task must fit between years 2 and 9998 so windows and rulers stay representable.
    if not in_calendar_range(start_ms, start_ms + int(round(hours * HOUR_MS))):
        return Dropped(index=index, reason="invalid_start")

    return Normalized(
        Task(
            id=_task_id(record.get("id"), index),
            name=sanitize_text(record.get("name"), NAME_MAX),
            start_ms=start_ms,
            duration_hours=hours,
            group_key1=sanitize_text(record.get("groupBy"), GROUP_KEY_MAX),
            group_key2=sanitize_text(record.get("groupBy2"), GROUP_KEY_MAX),
            color=sanitize_color(record.get("color")),
            is_locked=parse_tristate(record.get("isLocked")),
            is_global=parse_tristate(record.get("isGlobal")),
            comment=sanitize_text(record.get("comment"), COMMENT_MAX),
            totals=parse_totals(record.get("totals")),
        )
    )


def normalize_outcomes(records: Sequence[Any], tz: dt.tzinfo) -> List[Outcome]:
    """One outcome per input record, in order. Never raises for bad records.

    A record whose id was already taken by an earlier kept record is dropped
    as a duplicate.
    """
    outcomes: List[Outcome] = []
    seen_ids: set[int] = set()

    for i, rec in enumerate(records or ()):
        out = normalize_record(rec, i, tz)
        if isinstance(out, Normalized) and out.task.id in seen_ids:
            out = Dropped(index=i, reason="duplicate_id")
        if isinstance(out, Normalized):
            seen_ids.add(out.task.id)
        elif obs_enabled():
            rid = rec.get("id") if isinstance(rec, Mapping) else None
            eprint(f"[ganttlane.normalize] WARN: dropped record #{i} id={rid!r} reason={out.reason}")
        outcomes.append(out)

    return outcomes


def normalize_report(records: Sequence[Any], tz: dt.tzinfo) -> Tuple[List[Task], List[Dropped]]:
    tasks: List[Task] = []
    dropped: List[Dropped] = []
    for out in normalize_outcomes(records, tz):
        if isinstance(out, Normalized):
            tasks.append(out.task)
        else:
            dropped.append(out)
    return tasks, dropped


def normalize_records(records: Sequence[Any], tz: dt.tzinfo) -> List[Task]:
    tasks, _dropped = normalize_report(records, tz)
    return tasks


__all__ = [
    "MIN_DURATION_HOURS",
    "MAX_DURATION_HOURS",
    "clamp_duration_hours",
    "normalize_outcomes",
    "normalize_record",
    "normalize_records",
    "normalize_report",
    "parse_duration_hours",
    "parse_totals",
    "parse_tristate",
]
