# ganttlane/config.py
from __future__ import annotations

import datetime as dt
import math
import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional

from .buckets import clamp_day_start_hour
from .util.console import eprint, obs_enabled
from .util.sanitize import is_safe_url
from .util.tz import normalize_tz_name, resolve_tz
from .viewport import LaneGeometry
from .window import coerce_offset, normalize_scale

MAX_PAD_DAYS = 7


class ConfigError(ValueError):
    """Raised for configuration that cannot be clamped into shape (e.g. unknown tz)."""


@dataclass(frozen=True)
class TimelineConfig:
    scale: str = "week"
    offset: int = 0
    day_start_hour: int = 0
    tz: str = "local"
    branding_url: Optional[str] = None
    pad_days: int = 0
    geometry: LaneGeometry = field(default_factory=LaneGeometry)

    def tzinfo(self) -> dt.tzinfo:
        try:
            return resolve_tz(self.tz)
        except ValueError as ex:
            raise ConfigError(str(ex)) from ex

    def knobs(self) -> Dict[str, Any]:
        """Fields that change layout output (used for memo keys)."""
        return {
            "scale": self.scale,
            "offset": self.offset,
            "day_start_hour": self.day_start_hour,
            "tz": self.tz,
            "pad_days": self.pad_days,
            "geometry": {f.name: getattr(self.geometry, f.name) for f in fields(self.geometry)},
        }


def _pick(options: Mapping[str, Any], *names: str) -> Any:
    for n in names:
        if n in options and options[n] is not None:
            return options[n]
    return None


def _warn(msg: str) -> None:
    if obs_enabled():
        eprint(f"[ganttlane.config] WARN: {msg}")


def _branding(url: Any) -> Optional[str]:
    if url is None or (isinstance(url, str) and not url.strip()):
        return None
    if not is_safe_url(url):
        _warn(f"rejected branding url {str(url)[:40]!r}")
        return None
    return str(url).strip()


def _geometry(raw: Any) -> LaneGeometry:
    if not isinstance(raw, Mapping):
        return LaneGeometry()
    defaults = LaneGeometry()
    vals: Dict[str, float] = {}
    for f in fields(LaneGeometry):
        v = raw.get(f.name)
        if v is None:
            continue
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            _warn(f"geometry.{f.name}={v!r} is not a number; using default")
            continue
        vals[f.name] = float(v)
    try:
        return LaneGeometry(**vals)
    except ValueError as ex:
        _warn(f"geometry rejected ({ex}); using defaults")
        return defaults


def load_config(options: Optional[Mapping[str, Any]] = None, env: Optional[Mapping[str, str]] = None) -> TimelineConfig:
    """Build a TimelineConfig from host options, with env vars as defaults.

    Out-of-range values are clamped or defaulted. Only an unresolvable
    timezone raises ConfigError.
    """
    opts: Mapping[str, Any] = options or {}
    env = os.environ if env is None else env

    scale_raw = _pick(opts, "scale", "timeScale")
    if scale_raw is None:
        scale_raw = env.get("GANTTLANE_SCALE")
    scale = normalize_scale(scale_raw)
    if scale_raw is not None and str(scale_raw).strip().lower() not in {scale, "p4s", "4week", "custom"}:
        _warn(f"unknown scale {scale_raw!r}; using {scale}")

    offset_raw = _pick(opts, "offset")
    if offset_raw is None:
        offset_raw = env.get("GANTTLANE_OFFSET")
    offset = coerce_offset(offset_raw)

    dsh_raw = _pick(opts, "day_start_hour", "dayStartHour")
    if dsh_raw is None:
        dsh_raw = env.get("GANTTLANE_DAY_START_HOUR")
    day_start_hour = clamp_day_start_hour(dsh_raw) if dsh_raw is not None else 0
    if dsh_raw is not None and str(day_start_hour) != str(dsh_raw).strip():
        _warn(f"day_start_hour={dsh_raw!r} clamped to {day_start_hour}")

    tz_raw = _pick(opts, "tz", "timezone")
    if tz_raw is None:
        tz_raw = env.get("GANTTLANE_TZ")
    tz_name = normalize_tz_name(tz_raw)
    try:
        resolve_tz(tz_name)
    except ValueError as ex:
        raise ConfigError(str(ex)) from ex

    pad_raw = _pick(opts, "pad_days", "padDays")
    pad_days = max(0, min(MAX_PAD_DAYS, coerce_offset(pad_raw)))
    if pad_raw is not None and pad_days != coerce_offset(pad_raw):
        _warn(f"pad_days={pad_raw!r} clamped to {pad_days}")

    return TimelineConfig(
        scale=scale,
        offset=offset,
        day_start_hour=day_start_hour,
        tz=tz_name,
        branding_url=_branding(_pick(opts, "branding_url", "brandingUrl")),
        pad_days=pad_days,
        geometry=_geometry(_pick(opts, "geometry")),
    )


__all__ = [
    "ConfigError",
    "MAX_PAD_DAYS",
    "TimelineConfig",
    "load_config",
]
