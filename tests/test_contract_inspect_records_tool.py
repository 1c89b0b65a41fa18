from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

from ganttlane.tools import inspect_records

REPO_ROOT = Path(__file__).resolve().parents[1]
FIXTURE = REPO_ROOT / "tests" / "fixtures" / "records_sample.json"


def _run(*args: str) -> subprocess.CompletedProcess:
    cmd = [sys.executable, "-m", "ganttlane.tools.inspect_records", *args]
    return subprocess.run(cmd, cwd=str(REPO_ROOT), capture_output=True, text=True)


class TestInspectRecordsToolContract:
    def test_reports_kept_and_dropped(self):
        p = _run("--records", str(FIXTURE), "--tz", "UTC")
        combined = (p.stdout or "") + "\n" + (p.stderr or "")
        assert p.returncode == 0, combined
        assert "drop #5 reason=invalid_start" in p.stdout
        assert "drop #6 reason=missing_duration" in p.stdout
        assert "keep #0 id=1 hours=2 group='Team A'" in p.stdout
        assert "[ganttlane-inspect-records] OK: records=9 kept=7 dropped=2" in p.stdout

    def test_only_dropped(self, capsys):
        rc = inspect_records.main(["--records", str(FIXTURE), "--tz", "UTC", "--only-dropped"])
        out = capsys.readouterr().out
        assert rc == 0
        assert "keep #" not in out
        assert out.count("drop #") == 2

    def test_missing_file(self, tmp_path: Path, capsys):
        rc = inspect_records.main(["--records", str(tmp_path / "nope.json")])
        assert rc == 2
        assert "[ganttlane-inspect-records] ERROR: Missing records file" in capsys.readouterr().err

    def test_unmapped_required_columns(self, tmp_path: Path):
        rec = tmp_path / "host.json"
        rec.write_text(json.dumps([{"id": 1, "Debut": "2025-01-02T08:00:00Z", "Duree": 2}]), encoding="utf-8")
        maps = tmp_path / "mappings.json"
        maps.write_text(json.dumps({"startDate": "Debut", "duration": "Duree"}), encoding="utf-8")

        p = _run("--records", str(rec), "--mappings", str(maps), "--tz", "UTC")
        assert p.returncode == 3, (p.stdout or "") + (p.stderr or "")
        assert "required columns are not mapped" in p.stderr

        maps.write_text(json.dumps({"startDate": "Debut", "duration": "Duree", "groupBy": "Debut"}), encoding="utf-8")
        p = _run("--records", str(rec), "--mappings", str(maps), "--tz", "UTC")
        assert p.returncode == 0, (p.stdout or "") + (p.stderr or "")
        assert "kept=1 dropped=0" in p.stdout

    def test_bad_timezone(self, capsys):
        rc = inspect_records.main(["--records", str(FIXTURE), "--tz", "No/Such_Zone"])
        assert rc == 2
        assert "ERROR:" in capsys.readouterr().err
