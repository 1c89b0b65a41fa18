# ganttlane/viewport.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .model import Lane, LaneMetrics, PositionedTask, VisibleTask, Window
from .scheduler import lane_row_counts


@dataclass(frozen=True)
class LaneGeometry:
    base_lane_height: float = 28.0
    row_height: float = 24.0
    sub_row_gap: float = 4.0
    lane_outer_gap: float = 6.0
    top_margin: float = 10.0

    def __post_init__(self) -> None:
        for name in ("base_lane_height", "row_height"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0")
        for name in ("sub_row_gap", "lane_outer_gap", "top_margin"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")

    def rows_height(self, rows: int) -> float:
        """Height the lane needs for `rows` sub-rows."""
        if rows <= 1:
            return self.base_lane_height
        return rows * self.base_lane_height + (rows - 1) * self.sub_row_gap

    def bars_block_height(self, rows: int) -> float:
        rows = max(1, rows)
        return rows * self.row_height + (rows - 1) * self.sub_row_gap


def lane_layout(
    lanes: Sequence[Lane],
    row_counts: Mapping[int, int],
    geometry: LaneGeometry,
    label_heights: Optional[Mapping[int, float]] = None,
) -> Dict[int, Tuple[float, float]]:
    """lane index -> (top_px, height_px), stacking lanes in index order."""
    labels = label_heights or {}
    out: Dict[int, Tuple[float, float]] = {}
    top = geometry.top_margin
    for lane in sorted(lanes, key=lambda x: x.index):
        rows = row_counts.get(lane.index, 1)
        height = max(geometry.rows_height(rows), float(labels.get(lane.index, geometry.base_lane_height)))
        out[lane.index] = (top, height)
        top += height + geometry.lane_outer_gap
    return out


def clip_to_window(start_ms: int, end_ms: int, window: Window) -> Optional[Tuple[int, int]]:
    """Intersection of [start, end) with the window, or None when disjoint."""
    if end_ms <= window.min_ms or start_ms >= window.max_ms:
        return None
    return max(start_ms, window.min_ms), min(end_ms, window.max_ms)


def project_visible(
    positioned: Sequence[PositionedTask],
    window: Window,
    lanes: Sequence[Lane],
    geometry: Optional[LaneGeometry] = None,
    label_heights: Optional[Mapping[int, float]] = None,
) -> Tuple[List[VisibleTask], List[LaneMetrics]]:
    geo = geometry or LaneGeometry()
    counts = lane_row_counts(positioned)
    layout = lane_layout(lanes, counts, geo, label_heights)

    task_count: Dict[int, int] = {}
    hours: Dict[int, float] = {}
    totals: Dict[int, Dict[str, float]] = {}
    for p in positioned:
        task_count[p.lane_index] = task_count.get(p.lane_index, 0) + 1
        hours[p.lane_index] = hours.get(p.lane_index, 0.0) + p.task.duration_hours
        lane_totals = totals.setdefault(p.lane_index, {})
        for col, v in p.task.totals:
            lane_totals[col] = lane_totals.get(col, 0.0) + v

    visible: List[VisibleTask] = []
    for p in positioned:
        span = clip_to_window(p.start_ms, p.end_ms, window)
        if span is None:
            continue
        lo, hi = span
        left, width = window.percent_of(lo, hi)
        lane_top, lane_h = layout.get(p.lane_index, (geo.top_margin, geo.base_lane_height))
        rows = counts.get(p.lane_index, 1)
        # Center the block of bars when the lane is taller than the rows need.
        margin = (lane_h - geo.bars_block_height(rows)) / 2.0
        top = lane_top + margin + p.sub_row_index * (geo.row_height + geo.sub_row_gap)
        visible.append(
            VisibleTask(
                positioned=p,
                visible_start_ms=lo,
                visible_end_ms=hi,
                left_percent=left,
                width_percent=width,
                top_px=top,
                height_px=geo.row_height,
            )
        )

    metrics = [
        LaneMetrics(
            lane_index=idx,
            rows=counts.get(idx, 1),
            top_px=top,
            height_px=height,
            task_count=task_count.get(idx, 0),
            duration_hours=round(hours.get(idx, 0.0), 6),
            totals=tuple((col, round(v, 6)) for col, v in totals.get(idx, {}).items()),
        )
        for idx, (top, height) in sorted(layout.items())
    ]
    return visible, metrics


__all__ = [
    "LaneGeometry",
    "clip_to_window",
    "lane_layout",
    "project_visible",
]
