# ganttlane/records.py
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .util.console import eprint, obs_enabled

CONTENT_SEPARATOR = " - "


@dataclass(frozen=True)
class Column:
    name: str
    title: str
    optional: bool = True
    allow_multiple: bool = False


# Logical columns a host maps onto its own table columns.
COLUMNS: Tuple[Column, ...] = (
    Column("startDate", "Start date", optional=False),
    Column("duration", "Duration (hours)", optional=False),
    Column("groupBy", "Group by", optional=False),
    Column("groupBy2", "Then group by"),
    Column("color", "Color"),
    Column("isLocked", "Locked"),
    Column("isGlobal", "Global"),
    Column("comment", "Comment"),
    Column("contentCols", "Content", allow_multiple=True),
    Column("totalCols", "Total columns", allow_multiple=True),
    Column("editableCols", "Editable columns", allow_multiple=True),
)

_NAME_FALLBACKS = ("Titre", "Name", "name")

Mappings = Mapping[str, Union[str, Sequence[str], None]]


def _mapped_single(mappings: Optional[Mappings], logical: str) -> Optional[str]:
    if mappings is None:
        return logical
    v = mappings.get(logical, logical)
    if isinstance(v, str) and v:
        return v
    return None


def _mapped_multi(mappings: Optional[Mappings], logical: str) -> List[str]:
    if mappings is None:
        return []
    v = mappings.get(logical)
    if isinstance(v, str):
        return [v] if v else []
    if isinstance(v, (list, tuple)):
        return [x for x in v if isinstance(x, str) and x]
    return []


def mappings_complete(raws: Sequence[Any], mappings: Optional[Mappings]) -> bool:
    """True when every required logical column resolves to a host column.

    A column counts as resolved when it is mapped explicitly, or when it is
    unmapped but present under its logical name in the first record.
    """
    first = raws[0] if raws and isinstance(raws[0], Mapping) else {}
    for col in COLUMNS:
        if col.optional:
            continue
        if mappings is not None and isinstance(mappings.get(col.name), str) and mappings.get(col.name):
            continue
        if col.name in first:
            continue
        return False
    return True


def composite_name(raw: Mapping[str, Any], content_cols: Sequence[str]) -> str:
    parts: List[str] = []
    for c in content_cols:
        v = raw.get(c)
        if v is None or isinstance(v, bool):
            continue
        if isinstance(v, (list, tuple)):
            # Multi-valued cells (reference lists, choice lists).
            txt = ", ".join(str(x) for x in v if x is not None and str(x).strip())
        else:
            txt = str(v)
        txt = txt.strip()
        if txt:
            parts.append(txt)
    if parts:
        return CONTENT_SEPARATOR.join(parts)

    for k in _NAME_FALLBACKS:
        v = raw.get(k)
        if v is not None and str(v).strip():
            return str(v)
    return ""


def map_record(raw: Mapping[str, Any], mappings: Optional[Mappings] = None) -> Dict[str, Any]:
    """Map one host record onto the canonical loose record.

    No validation happens here; the normalizer owns that.
    """

    def pick(logical: str) -> Any:
        col = _mapped_single(mappings, logical)
        return raw.get(col) if col else None

    return {
        "id": raw.get("id"),
        "name": composite_name(raw, _mapped_multi(mappings, "contentCols")),
        "start": pick("startDate"),
        "duration": pick("duration"),
        "groupBy": pick("groupBy"),
        "groupBy2": pick("groupBy2"),
        "color": pick("color"),
        "isLocked": pick("isLocked"),
        "isGlobal": pick("isGlobal"),
        "comment": pick("comment"),
        "totals": {c: raw.get(c) for c in _mapped_multi(mappings, "totalCols")},
    }


def map_records(raws: Sequence[Any], mappings: Optional[Mappings] = None) -> List[Dict[str, Any]]:
    """Map a host batch; an incomplete column mapping yields no records."""
    if not raws:
        return []
    if not mappings_complete(raws, mappings):
        if obs_enabled():
            eprint("[ganttlane.records] INFO: required columns are not mapped yet; no records")
        return []
    out: List[Dict[str, Any]] = []
    for raw in raws:
        # Non-mapping rows pass through for the normalizer to drop.
        out.append(map_record(raw, mappings) if isinstance(raw, Mapping) else raw)
    return out


def editable_columns(mappings: Optional[Mappings]) -> Tuple[str, ...]:
    return tuple(_mapped_multi(mappings, "editableCols"))


def host_column(mappings: Optional[Mappings], logical: str) -> Optional[str]:
    return _mapped_single(mappings, logical)


def load_records_json(path: Union[str, Path]) -> List[Any]:
    """Load a host batch from JSON: either a list or {"records": [...]}."""
    p = Path(path)
    obj = json.loads(p.read_text(encoding="utf-8", errors="replace"))
    if isinstance(obj, dict):
        obj = obj.get("records")
    if not isinstance(obj, list):
        raise ValueError(f"records JSON must be a list or an object with a 'records' list; got {type(obj).__name__}")
    return obj


__all__ = [
    "COLUMNS",
    "CONTENT_SEPARATOR",
    "Column",
    "composite_name",
    "editable_columns",
    "host_column",
    "load_records_json",
    "map_record",
    "map_records",
    "mappings_complete",
]
