from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .config import ConfigError, load_config
from .layout import build_layout
from .records import load_records_json
from .util.timeparse import parse_instant_ms


def _load_object(path: str, what: str) -> Dict[str, Any]:
    p = Path(path)
    try:
        obj = json.loads(p.read_text(encoding="utf-8", errors="replace"))
    except FileNotFoundError:
        raise SystemExit(f"Missing {what} file: {p}")
    except ValueError as e:
        raise SystemExit(f"Failed to parse {what} JSON: {p} ({e})")
    if not isinstance(obj, dict):
        raise SystemExit(f"{what} JSON must be an object; got {type(obj).__name__}")
    return obj


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        prog="ganttlane",
        description="Compute a Gantt timeline layout (lanes, sub-rows, window, ruler) from task records.",
    )
    ap.add_argument("--records", required=True, help="Records JSON: a list, or an object with a 'records' list")
    ap.add_argument("--mappings", default=None, help="Column mappings JSON (logical column -> host column)")
    ap.add_argument("--options", default=None, help="Widget options JSON (scale, offset, dayStartHour, tz, ...)")
    ap.add_argument("--scale", default=None, help="week | month | quarter | custom4week (default: week)")
    ap.add_argument("--offset", type=int, default=None, help="Periods shifted from the reference period (default: 0)")
    ap.add_argument("--day-start-hour", type=int, default=None, help="Hour (0-23) where day buckets begin (default: 0)")
    ap.add_argument("--tz", default=None, help="Calendar timezone (default: env GANTTLANE_TZ or 'local')")
    ap.add_argument("--now", default=None, help="Reference instant when there are no tasks (ISO-8601; default: now)")
    ap.add_argument("--out", default=None, help="Output JSON path (default: stdout)")
    ap.add_argument("--pretty", action="store_true", help="Pretty JSON output")
    args = ap.parse_args(argv)

    try:
        records = load_records_json(args.records)
    except FileNotFoundError:
        raise SystemExit(f"Missing records file: {args.records}")
    except ValueError as e:
        raise SystemExit(f"Failed to load records: {e}")

    mappings: Optional[Dict[str, Any]] = None
    if args.mappings:
        mappings = _load_object(args.mappings, "mappings")

    options: Dict[str, Any] = _load_object(args.options, "options") if args.options else {}
    for key, val in (
        ("scale", args.scale),
        ("offset", args.offset),
        ("day_start_hour", args.day_start_hour),
        ("tz", args.tz),
    ):
        if val is not None:
            options[key] = val

    try:
        cfg = load_config(options)
    except ConfigError as e:
        raise SystemExit(f"Invalid --tz value: {e}")

    if args.now:
        now_ms = parse_instant_ms(args.now, cfg.tzinfo())
        if now_ms is None:
            raise SystemExit(f"Invalid --now value: {args.now!r}")
    else:
        now_ms = int(time.time() * 1000)

    layout = build_layout(records, cfg, now_ms, mappings=mappings)
    txt = json.dumps(layout.to_dict(), ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out:
        out_path = Path(args.out)
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise SystemExit(f"Cannot create output directory '{out_path.parent}': {e}")
        out_path.write_text(txt + "\n", encoding="utf-8", newline="\n")
        print(str(out_path))
    else:
        sys.stdout.write(txt + "\n")


if __name__ == "__main__":
    main()
