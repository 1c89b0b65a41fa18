# ganttlane/lanes.py
from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from .model import Lane, Task

EMPTY_GROUP_LABEL = "—"

LaneKey = Tuple[str, str]


def build_lanes(tasks: Sequence[Task], *, empty_group_label: str = EMPTY_GROUP_LABEL) -> List[Lane]:
    """Emit header and sub-group lanes in first-seen order.

    Each distinct group_key1 gets a header lane, followed by one lane per new
    non-empty group_key2 among its members (in task order). Indices come from
    a single counter, so they are dense and follow discovery order rather
    than lexical order.
    """
    members: Dict[str, List[Task]] = {}
    for t in tasks:
        members.setdefault(t.group_key1, []).append(t)

    lanes: List[Lane] = []
    for g1, group in members.items():
        lanes.append(
            Lane(
                index=len(lanes),
                group_key1=g1,
                group_key2="",
                label=g1 or empty_group_label,
                is_group_header=True,
            )
        )
        seen_sub: set[str] = set()
        for t in group:
            g2 = t.group_key2
            if not g2 or g2 in seen_sub:
                continue
            seen_sub.add(g2)
            lanes.append(Lane(index=len(lanes), group_key1=g1, group_key2=g2, label=g2, is_group_header=False))

    return lanes


def lane_lookup(lanes: Sequence[Lane]) -> Dict[LaneKey, int]:
    return {lane.key: lane.index for lane in lanes}


def lane_index_for(task: Task, lookup: Dict[LaneKey, int]) -> int:
    """Lane for a task: its sub-group lane, else its group header, else 0."""
    idx = lookup.get((task.group_key1, task.group_key2))
    if idx is None:
        idx = lookup.get((task.group_key1, ""), 0)
    return idx


__all__ = [
    "EMPTY_GROUP_LABEL",
    "build_lanes",
    "lane_index_for",
    "lane_lookup",
]
