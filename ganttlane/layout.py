# ganttlane/layout.py
from __future__ import annotations

import datetime as dt
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .buckets import generate_ruler
from .config import TimelineConfig
from .lanes import build_lanes, lane_lookup
from .model import Dropped, Lane, LaneMetrics, PositionedTask, RulerRow, Task, VisibleTask, Window
from .normalize import normalize_report
from .records import Mappings, map_records
from .scheduler import assign_sub_rows
from .util.console import eprint, obs_enabled
from .util.layoutkey import make_layout_key
from .viewport import project_visible
from .window import compute_window, reference_instant


@dataclass(frozen=True)
class TimelineLayout:
    layout_key: str
    tasks: Tuple[Task, ...]
    dropped: Tuple[Dropped, ...]
    lanes: Tuple[Lane, ...]
    positioned: Tuple[PositionedTask, ...]
    window: Window
    ruler: Tuple[RulerRow, ...]
    visible: Tuple[VisibleTask, ...]
    lane_metrics: Tuple[LaneMetrics, ...]
    branding_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layout_key": self.layout_key,
            "window": self.window.to_dict(),
            "ruler": [r.to_dict() for r in self.ruler],
            "lanes": [lane.to_dict() for lane in self.lanes],
            "lane_metrics": [m.to_dict() for m in self.lane_metrics],
            "visible": [v.to_dict() for v in self.visible],
            "dropped": [{"index": d.index, "reason": d.reason} for d in self.dropped],
            "counts": {
                "records": len(self.tasks) + len(self.dropped),
                "tasks": len(self.tasks),
                "visible": len(self.visible),
                "lanes": len(self.lanes),
            },
            "branding_url": self.branding_url,
        }


def build_layout(
    records: Sequence[Any],
    config: TimelineConfig,
    now_ms: int,
    *,
    mappings: Optional[Mappings] = None,
    label_heights: Optional[Mapping[int, float]] = None,
    layout_key: Optional[str] = None,
) -> TimelineLayout:
    """Run the whole pipeline for one record batch.

    records -> tasks -> lanes -> positioned tasks; independently
    scale/offset/reference -> window -> ruler; then positioned + window ->
    visible tasks. `now_ms` is only used as the reference when there are no tasks.
    """
    tz = config.tzinfo()
    loose = map_records(records, mappings) if mappings is not None else list(records or ())

    tasks, dropped = normalize_report(loose, tz)
    lanes = build_lanes(tasks)
    positioned = assign_sub_rows(tasks, lane_lookup(lanes))

    window, ruler = _window_and_ruler(config, tz, reference_instant(tasks, now_ms), now_ms)
    visible, metrics = project_visible(positioned, window, lanes, config.geometry, label_heights)

    return TimelineLayout(
        layout_key=layout_key or _key_for(records, config, now_ms, mappings, label_heights),
        tasks=tuple(tasks),
        dropped=tuple(dropped),
        lanes=tuple(lanes),
        positioned=tuple(positioned),
        window=window,
        ruler=ruler,
        visible=tuple(visible),
        lane_metrics=tuple(metrics),
        branding_url=config.branding_url,
    )


def _window_and_ruler(
    config: TimelineConfig,
    tz: dt.tzinfo,
    reference_ms: int,
    fallback_ms: int,
) -> Tuple[Window, Tuple[RulerRow, ...]]:
    """Window and ruler for `reference_ms`, or for `fallback_ms` when the
    reference lies outside the representable calendar."""
    try:
        window = compute_window(config.scale, config.offset, reference_ms, tz, pad_days=config.pad_days)
        return window, generate_ruler(window, tz, day_start_hour=config.day_start_hour)
    except (OverflowError, ValueError) as ex:
        if reference_ms == fallback_ms:
            raise
        if obs_enabled():
            eprint(f"[ganttlane.layout] WARN: reference {reference_ms} not representable ({ex}); using now")
    window = compute_window(config.scale, 0, fallback_ms, tz, pad_days=config.pad_days)
    return window, generate_ruler(window, tz, day_start_hour=config.day_start_hour)


def _key_for(
    records: Sequence[Any],
    config: TimelineConfig,
    now_ms: int,
    mappings: Optional[Mappings],
    label_heights: Optional[Mapping[int, float]],
) -> str:
    knobs: Dict[str, Any] = dict(config.knobs())
    knobs["now_ms"] = int(now_ms)
    knobs["mappings"] = dict(mappings) if mappings is not None else None
    knobs["label_heights"] = {str(k): v for k, v in (label_heights or {}).items()}
    return make_layout_key(list(records or ()), knobs)


class LayoutCache:
    """Small LRU of layouts keyed by make_layout_key.

    The key is computed before the pipeline runs, so `now_ms` is always part
    of it; callers that want hits across clock ticks should pass a stable
    `now_ms` (e.g. today's midnight).
    """

    def __init__(self, max_entries: int = 8) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = int(max_entries)
        self._entries: "OrderedDict[str, TimelineLayout]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get_layout(
        self,
        records: Sequence[Any],
        config: TimelineConfig,
        now_ms: int,
        *,
        mappings: Optional[Mappings] = None,
        label_heights: Optional[Mapping[int, float]] = None,
    ) -> TimelineLayout:
        key = _key_for(records, config, now_ms, mappings, label_heights)
        got = self._entries.get(key)
        if got is not None:
            self._entries.move_to_end(key)
            self.hits += 1
            if obs_enabled():
                eprint(f"[ganttlane.layout] cache.hit key={key}")
            return got

        self.misses += 1
        out = build_layout(records, config, now_ms, mappings=mappings, label_heights=label_heights, layout_key=key)
        self._entries[key] = out
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        if obs_enabled():
            eprint(f"[ganttlane.layout] cache.miss key={key} tasks={len(out.tasks)} dropped={len(out.dropped)}")
        return out

    def clear(self) -> None:
        self._entries.clear()


def ruler_only(config: TimelineConfig, reference_ms: int) -> Tuple[Window, Tuple[RulerRow, ...]]:
    """Window and ruler without any tasks (e.g. for an empty chart header)."""
    tz = config.tzinfo()
    window = compute_window(config.scale, config.offset, reference_ms, tz, pad_days=config.pad_days)
    return window, generate_ruler(window, tz, day_start_hour=config.day_start_hour)


__all__ = [
    "LayoutCache",
    "TimelineLayout",
    "build_layout",
    "ruler_only",
]
