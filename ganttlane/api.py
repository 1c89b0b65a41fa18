"""ganttlane.api

Stable *library* entrypoint for ganttlane.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from ganttlane.buckets import generate_ruler
from ganttlane.config import ConfigError, TimelineConfig, load_config
from ganttlane.edit import EditRejected, build_update
from ganttlane.lanes import build_lanes, lane_lookup
from ganttlane.layout import LayoutCache, TimelineLayout, build_layout, ruler_only
from ganttlane.model import Bucket, Lane, PositionedTask, Task, VisibleTask, Window
from ganttlane.normalize import normalize_records, normalize_report
from ganttlane.records import editable_columns, map_records
from ganttlane.scheduler import assign_sub_rows, overlap_depth
from ganttlane.viewport import LaneGeometry, project_visible
from ganttlane.window import compute_window, reference_instant

# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
_PUBLIC_EXPORTS = (
    "Bucket",
    "ConfigError",
    "EditRejected",
    "Lane",
    "LaneGeometry",
    "LayoutCache",
    "PositionedTask",
    "Task",
    "TimelineConfig",
    "TimelineLayout",
    "VisibleTask",
    "Window",
    "assign_sub_rows",
    "build_lanes",
    "build_layout",
    "build_update",
    "compute_window",
    "editable_columns",
    "generate_ruler",
    "lane_lookup",
    "load_config",
    "map_records",
    "normalize_records",
    "normalize_report",
    "overlap_depth",
    "project_visible",
    "reference_instant",
    "ruler_only",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
