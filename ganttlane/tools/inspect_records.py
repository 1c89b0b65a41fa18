#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ganttlane.config import ConfigError, load_config
from ganttlane.model import Dropped
from ganttlane.normalize import normalize_outcomes
from ganttlane.records import load_records_json, map_records


def _die(msg: str, rc: int = 2) -> int:
    print(f"[ganttlane-inspect-records] ERROR: {msg}", file=sys.stderr)
    return rc


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="ganttlane-inspect-records",
        description="Report which records would be kept or dropped by normalization, and why.",
    )
    ap.add_argument("--records", required=True, help="Records JSON path")
    ap.add_argument("--mappings", default=None, help="Column mappings JSON path")
    ap.add_argument("--tz", default=None, help="Timezone for naive dates (default: env GANTTLANE_TZ or 'local')")
    ap.add_argument("--only-dropped", action="store_true", help="Print dropped records only")
    ns = ap.parse_args(argv)

    p = Path(ns.records)
    if not p.exists():
        return _die(f"Missing records file: {p}")
    try:
        records = load_records_json(p)
    except ValueError as e:
        return _die(f"Failed to load records: {p} ({e})")

    mappings: Optional[Dict[str, Any]] = None
    if ns.mappings:
        try:
            mappings = json.loads(Path(ns.mappings).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            return _die(f"Failed to load mappings: {e}")
        if not isinstance(mappings, dict):
            return _die("mappings JSON must be an object")

    try:
        tz = load_config({"tz": ns.tz} if ns.tz else {}).tzinfo()
    except ConfigError as e:
        return _die(str(e))

    loose = map_records(records, mappings) if mappings is not None else records
    if records and not loose:
        return _die("required columns are not mapped (startDate, duration, groupBy)", rc=3)

    kept = 0
    dropped = 0
    for i, out in enumerate(normalize_outcomes(loose, tz)):
        if isinstance(out, Dropped):
            dropped += 1
            print(f"drop #{i} reason={out.reason}")
            continue
        kept += 1
        if not ns.only_dropped:
            print(f"keep #{i} id={out.task.id} hours={out.task.duration_hours:g} group={out.task.group_key1!r}")

    print(f"[ganttlane-inspect-records] OK: records={len(loose)} kept={kept} dropped={dropped}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
