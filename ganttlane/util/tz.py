# ganttlane/util/tz.py
from __future__ import annotations

import datetime as dt
import os
import re
import time
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")

_LOCALTIME = Path("/etc/localtime")


def normalize_tz_name(name: Optional[str]) -> str:
    """Normalize a timezone identifier.

    Supported forms:
      - None/"" -> "local"
      - "local" / "system" -> "local" (resolve to the machine's local timezone)
      - "UTC" / "Z" / "GMT" -> "UTC"
      - IANA names, e.g. "Europe/Paris"
      - Fixed offsets: "+02:00", "+0200", "-05:00"
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"

    low = s.lower()
    if low in {"local", "system", "native"}:
        return "local"
    if low in {"utc", "z", "gmt", "utc0", "utc+0"}:
        return "UTC"
    return s


class _SystemLocal(dt.tzinfo):
    """Local time as the C library sees it, DST rules included."""

    def _tm(self, d: Optional[dt.datetime]) -> time.struct_time:
        if d is None:
            return time.localtime()
        stamp = time.mktime((d.year, d.month, d.day, d.hour, d.minute, d.second, d.weekday(), 0, -1))
        return time.localtime(stamp)

    def utcoffset(self, d: Optional[dt.datetime]) -> dt.timedelta:
        return dt.timedelta(seconds=self._tm(d).tm_gmtoff)

    def dst(self, d: Optional[dt.datetime]) -> dt.timedelta:
        return dt.timedelta(hours=1) if self._tm(d).tm_isdst > 0 else dt.timedelta(0)

    def tzname(self, d: Optional[dt.datetime]) -> str:
        return self._tm(d).tm_zone


def _zone_from_key(key: str) -> Optional[dt.tzinfo]:
    try:
        if key.startswith("/"):
            with open(key, "rb") as fh:
                return ZoneInfo.from_file(fh, key=key)
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, OSError, ValueError):
        return None


def system_zone() -> dt.tzinfo:
    """The machine's timezone with its full DST rules.

    Lookup order: $TZ, the /etc/localtime link target, the /etc/localtime
    file, then the C library's local time. The result never depends on the
    current date.
    """
    env_key = (os.environ.get("TZ") or "").strip().lstrip(":")
    if env_key:
        # A POSIX rule string such as "CET-1CEST" is only understood by the C library.
        return _zone_from_key(env_key) or _SystemLocal()

    candidates = []
    target = os.path.realpath(_LOCALTIME)
    if "zoneinfo/" in target:
        candidates.append(target.split("zoneinfo/", 1)[1])
    if _LOCALTIME.is_file():
        candidates.append(str(_LOCALTIME))

    for key in candidates:
        zone = _zone_from_key(key)
        if zone is not None:
            return zone
    return _SystemLocal()


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Resolve a timezone name into a tzinfo.

    Raises ValueError for invalid timezone identifiers.
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return dt.timezone.utc

    if tz_name == "local":
        return system_zone()

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh = int(hh_s)
        mm = int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        return dt.timezone(dt.timedelta(minutes=sign * (hh * 60 + mm)))

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as ex:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex


def local_epoch_ms(d: dt.date, tz: dt.tzinfo, hour: int = 0) -> int:
    """Epoch ms for `hour`:00 on date `d` in timezone `tz`."""
    aware = dt.datetime(d.year, d.month, d.day, hour, 0, 0, tzinfo=tz)
    return int(aware.timestamp() * 1000)


def midnight_epoch_ms(d: dt.date, tz: dt.tzinfo) -> int:
    return local_epoch_ms(d, tz, 0)


def local_date(ms: int, tz: dt.tzinfo) -> dt.date:
    utc = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc) + dt.timedelta(milliseconds=int(ms))
    return utc.astimezone(tz).date()


def monday_of(d: dt.date) -> dt.date:
    return d - dt.timedelta(days=d.weekday())


def add_months(d: dt.date, months: int) -> dt.date:
    """First day of the month `months` away from the month containing `d`."""
    idx = d.year * 12 + (d.month - 1) + int(months)
    return dt.date(idx // 12, idx % 12 + 1, 1)


def iso_week_number(d: dt.date) -> int:
    # Thursday-anchored: week 1 contains the year's first Thursday.
    return d.isocalendar()[1]
