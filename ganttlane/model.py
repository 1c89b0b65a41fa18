# ganttlane/model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS

SCALES: Tuple[str, ...] = ("week", "month", "quarter", "custom4week")


@dataclass(frozen=True)
class Task:
    id: int
    name: str
    start_ms: int
    duration_hours: float
    group_key1: str = ""
    group_key2: str = ""
    color: Optional[str] = None
    is_locked: Optional[bool] = None
    is_global: Optional[bool] = None
    comment: str = ""
    # (host column, value) pairs from the mapped total columns.
    totals: Tuple[Tuple[str, float], ...] = ()

    @property
    def end_ms(self) -> int:
        return self.start_ms + int(round(self.duration_hours * HOUR_MS))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "duration_hours": self.duration_hours,
            "group_key1": self.group_key1,
            "group_key2": self.group_key2,
            "color": self.color,
            "is_locked": self.is_locked,
            "is_global": self.is_global,
            "comment": self.comment,
            "totals": dict(self.totals),
        }


@dataclass(frozen=True)
class Normalized:
    task: Task


@dataclass(frozen=True)
class Dropped:
    index: int
    reason: str  # "not_a_mapping" | "missing_start" | "invalid_start" | ...


@dataclass(frozen=True)
class Lane:
    index: int
    group_key1: str
    group_key2: str
    label: str
    is_group_header: bool

    @property
    def key(self) -> Tuple[str, str]:
        return (self.group_key1, self.group_key2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "group_key1": self.group_key1,
            "group_key2": self.group_key2,
            "label": self.label,
            "is_group_header": self.is_group_header,
        }


@dataclass(frozen=True)
class PositionedTask:
    task: Task
    lane_index: int
    sub_row_index: int

    @property
    def start_ms(self) -> int:
        return self.task.start_ms

    @property
    def end_ms(self) -> int:
        return self.task.end_ms


@dataclass(frozen=True)
class Window:
    """Half-open visible range [min_ms, max_ms)."""

    min_ms: int
    max_ms: int
    scale: str
    offset: int
    # Ruler display range; equals [min_ms, max_ms) unless padding is configured.
    display_min_ms: Optional[int] = None
    display_max_ms: Optional[int] = None

    @property
    def total_ms(self) -> int:
        return max(1, self.max_ms - self.min_ms)

    @property
    def last_ms(self) -> int:
        """Inclusive end, for labels."""
        return self.max_ms - 1

    def percent_of(self, start_ms: int, end_ms: int) -> Tuple[float, float]:
        left = (start_ms - self.min_ms) / self.total_ms * 100.0
        width = (end_ms - start_ms) / self.total_ms * 100.0
        return left, width

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min_ms": self.min_ms,
            "max_ms": self.max_ms,
            "last_ms": self.last_ms,
            "scale": self.scale,
            "offset": self.offset,
            "display_min_ms": self.min_ms if self.display_min_ms is None else self.display_min_ms,
            "display_max_ms": self.max_ms if self.display_max_ms is None else self.display_max_ms,
        }


@dataclass(frozen=True)
class Bucket:
    start_ms: int
    end_ms: int
    left_percent: float
    width_percent: float
    label: str
    date_ms: Optional[int] = None
    slot: Optional[str] = None  # "morning" | "afternoon" | "night"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "left_percent": self.left_percent,
            "width_percent": self.width_percent,
            "label": self.label,
        }
        if self.date_ms is not None:
            out["date_ms"] = self.date_ms
        if self.slot is not None:
            out["slot"] = self.slot
        return out


@dataclass(frozen=True)
class RulerRow:
    kind: str  # "month" | "week" | "day" | "slot"
    buckets: Tuple[Bucket, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "buckets": [b.to_dict() for b in self.buckets]}


@dataclass(frozen=True)
class VisibleTask:
    positioned: PositionedTask
    visible_start_ms: int
    visible_end_ms: int
    left_percent: float
    width_percent: float
    top_px: float
    height_px: float

    @property
    def task(self) -> Task:
        return self.positioned.task

    def to_dict(self) -> Dict[str, Any]:
        out = self.task.to_dict()
        out.update(
            {
                "lane_index": self.positioned.lane_index,
                "sub_row_index": self.positioned.sub_row_index,
                "visible_start_ms": self.visible_start_ms,
                "visible_end_ms": self.visible_end_ms,
                "left_percent": self.left_percent,
                "width_percent": self.width_percent,
                "top_px": self.top_px,
                "height_px": self.height_px,
            }
        )
        return out


@dataclass(frozen=True)
class LaneMetrics:
    lane_index: int
    rows: int
    top_px: float
    height_px: float
    task_count: int
    duration_hours: float
    totals: Tuple[Tuple[str, float], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lane_index": self.lane_index,
            "rows": self.rows,
            "top_px": self.top_px,
            "height_px": self.height_px,
            "task_count": self.task_count,
            "duration_hours": self.duration_hours,
            "totals": dict(self.totals),
        }


@dataclass(frozen=True)
class UpdateRequest:
    row_id: int
    fields: Dict[str, Any] = field(default_factory=dict)

    def to_action(self, table: str) -> List[Any]:
        return ["UpdateRecord", table, self.row_id, dict(self.fields)]


__all__ = [
    "HOUR_MS",
    "DAY_MS",
    "SCALES",
    "Task",
    "Normalized",
    "Dropped",
    "Lane",
    "PositionedTask",
    "Window",
    "Bucket",
    "RulerRow",
    "VisibleTask",
    "LaneMetrics",
    "UpdateRequest",
]
