# ganttlane/scheduler.py
from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from .lanes import LaneKey, lane_index_for
from .model import PositionedTask, Task


def assign_sub_rows(tasks: Sequence[Task], lookup: Dict[LaneKey, int]) -> List[PositionedTask]:
    """Greedy interval partitioning, lane by lane.

    Within a lane, tasks are stable-sorted by start and each one goes into the
    lowest-index row whose last end is <= its start (touching intervals share
    a row). This uses exactly as many rows as the lane's overlap depth.

    Output is grouped by lane in first-seen lane order, and by start within a lane.
    """
    by_lane: Dict[int, List[Task]] = {}
    for t in tasks:
        by_lane.setdefault(lane_index_for(t, lookup), []).append(t)

    out: List[PositionedTask] = []
    for lane_index, members in by_lane.items():
        row_ends: List[int] = []
        for t in sorted(members, key=lambda x: x.start_ms):
            for i, last_end in enumerate(row_ends):
                if last_end <= t.start_ms:
                    row_ends[i] = t.end_ms
                    out.append(PositionedTask(task=t, lane_index=lane_index, sub_row_index=i))
                    break
            else:
                row_ends.append(t.end_ms)
                out.append(PositionedTask(task=t, lane_index=lane_index, sub_row_index=len(row_ends) - 1))
    return out


def lane_row_counts(positioned: Sequence[PositionedTask]) -> Dict[int, int]:
    counts: Dict[int, int] = {}
    for p in positioned:
        need = p.sub_row_index + 1
        if need > counts.get(p.lane_index, 0):
            counts[p.lane_index] = need
    return counts


def overlap_depth(intervals: Sequence[Tuple[int, int]]) -> int:
    """Largest number of half-open intervals active at one instant (sweep line)."""
    pts: List[Tuple[int, int]] = []
    for start_ms, end_ms in intervals:
        if end_ms <= start_ms:
            continue
        pts.append((start_ms, +1))
        pts.append((end_ms, -1))
    # Ends sort before starts at the same instant: touching is not overlapping.
    pts.sort(key=lambda x: (x[0], x[1]))

    active = 0
    best = 0
    for _t, kind in pts:
        active += kind
        if active > best:
            best = active
    return best


__all__ = [
    "assign_sub_rows",
    "lane_row_counts",
    "overlap_depth",
]
