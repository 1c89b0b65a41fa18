# ganttlane/util/layoutkey.py
from __future__ import annotations

import hashlib
import json
from typing import Any, Mapping, Sequence


def _default(obj: Any) -> str:
    iso = getattr(obj, "isoformat", None)
    if callable(iso):
        return str(iso())
    return repr(obj)


def make_layout_key(records: Sequence[Any], knobs: Mapping[str, Any]) -> str:
    """Return a stable key for memoizing a layout computation.

    The key covers the record batch and every config knob that changes the
    output, so a change to either never reuses a stale layout.
    """
    body = {"records": list(records), "knobs": dict(knobs)}
    try:
        raw = json.dumps(body, sort_keys=True, default=_default, ensure_ascii=True, separators=(",", ":"))
    except (TypeError, ValueError):
        # Mixed-type dict keys cannot be sorted; fall back to repr.
        raw = repr(body)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]
