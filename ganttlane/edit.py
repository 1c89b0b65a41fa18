# ganttlane/edit.py
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Mapping, Optional, Sequence

from .model import UpdateRequest
from .normalize import parse_duration_hours
from .records import Mappings, host_column
from .util.sanitize import COMMENT_MAX, NAME_MAX, sanitize_text
from .util.timeparse import format_iso_utc, parse_instant_ms

# Logical task field -> logical host column.
EDITABLE_FIELDS: Dict[str, str] = {
    "name": "contentCols",
    "start": "startDate",
    "duration": "duration",
    "comment": "comment",
}


class EditRejected(ValueError):
    """Raised when an edit request names a field that may not be written."""


def _host_field(field: str, mappings: Optional[Mappings]) -> Optional[str]:
    logical = EDITABLE_FIELDS[field]
    if logical == "contentCols":
        cols = mappings.get("contentCols") if mappings is not None else None
        if isinstance(cols, str) and cols:
            return cols
        if isinstance(cols, (list, tuple)):
            for c in cols:
                if isinstance(c, str) and c:
                    return c
        return "name"
    return host_column(mappings, logical)


def build_update(
    task_id: int,
    changes: Mapping[str, Any],
    editable: Sequence[str],
    *,
    mappings: Optional[Mappings] = None,
    tz: dt.tzinfo = dt.timezone.utc,
) -> UpdateRequest:
    """Translate a partial task edit into a host row update.

    `editable` is the host-declared set of editable column names; a field is
    writable only if it is one of EDITABLE_FIELDS and its host column is
    declared editable. The engine never performs the write itself.
    """
    if isinstance(task_id, bool) or not isinstance(task_id, int) or task_id <= 0:
        raise EditRejected(f"task id must be a positive host row id; got {task_id!r}")
    if not changes:
        raise EditRejected("no fields to update")

    allowed = {str(c) for c in editable}
    fields: Dict[str, Any] = {}
    for key, value in changes.items():
        if key not in EDITABLE_FIELDS:
            raise EditRejected(f"field {key!r} is not editable (allowed: {', '.join(EDITABLE_FIELDS)})")
        col = _host_field(key, mappings)
        if not col or (col not in allowed and key not in allowed):
            raise EditRejected(f"field {key!r} (column {col!r}) is not declared editable by the host")

        if key == "name":
            fields[col] = sanitize_text(value, NAME_MAX)
        elif key == "comment":
            fields[col] = sanitize_text(value, COMMENT_MAX)
        elif key == "start":
            ms = parse_instant_ms(value, tz)
            if ms is None:
                raise EditRejected(f"start value {value!r} is not a date")
            fields[col] = format_iso_utc(ms)
        else:
            hours = parse_duration_hours(value)
            if hours is None:
                raise EditRejected(f"duration value {value!r} is not numeric")
            fields[col] = hours

    return UpdateRequest(row_id=task_id, fields=fields)


__all__ = [
    "EDITABLE_FIELDS",
    "EditRejected",
    "build_update",
]
