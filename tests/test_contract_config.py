from __future__ import annotations

import datetime as dt
import os
import unittest
from unittest.mock import patch

from ganttlane.config import MAX_PAD_DAYS, ConfigError, TimelineConfig, load_config
from ganttlane.viewport import LaneGeometry


class TestConfigContract(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = load_config(None, env={})
        self.assertEqual((cfg.scale, cfg.offset, cfg.day_start_hour, cfg.tz, cfg.pad_days), ("week", 0, 0, "local", 0))
        self.assertIsNone(cfg.branding_url)
        self.assertEqual(cfg.geometry, LaneGeometry())

    def test_aliases_and_host_option_names(self) -> None:
        cfg = load_config({"timeScale": "p4s", "dayStartHour": 6, "timezone": "utc", "padDays": 2}, env={})
        self.assertEqual((cfg.scale, cfg.day_start_hour, cfg.tz, cfg.pad_days), ("custom4week", 6, "UTC", 2))

    def test_out_of_range_values_are_clamped(self) -> None:
        cfg = load_config({"scale": "decade", "offset": "x", "day_start_hour": 30, "pad_days": 99}, env={})
        self.assertEqual(cfg.scale, "week")
        self.assertEqual(cfg.offset, 0)
        self.assertEqual(cfg.day_start_hour, 23)
        self.assertEqual(cfg.pad_days, MAX_PAD_DAYS)
        self.assertEqual(load_config({"pad_days": -4, "day_start_hour": -1}, env={}).pad_days, 0)

    def test_unknown_timezone_raises(self) -> None:
        with self.assertRaises(ConfigError):
            load_config({"tz": "Mars/Olympus_Mons"}, env={})
        with self.assertRaises(ConfigError):
            TimelineConfig(tz="+25:00").tzinfo()
        self.assertTrue(issubclass(ConfigError, ValueError))

    def test_fixed_offset_and_iana_timezones(self) -> None:
        self.assertEqual(load_config({"tz": "+02:00"}, env={}).tzinfo().utcoffset(None), dt.timedelta(hours=2))
        self.assertEqual(load_config({"tz": "-0530"}, env={}).tzinfo().utcoffset(None), dt.timedelta(hours=-5, minutes=-30))

    def test_env_vars_fill_missing_options_only(self) -> None:
        env = {
            "GANTTLANE_SCALE": "month",
            "GANTTLANE_OFFSET": "-1",
            "GANTTLANE_DAY_START_HOUR": "5",
            "GANTTLANE_TZ": "UTC",
        }
        cfg = load_config({"scale": "quarter"}, env=env)
        self.assertEqual((cfg.scale, cfg.offset, cfg.day_start_hour, cfg.tz), ("quarter", -1, 5, "UTC"))

    def test_process_environment_is_the_default(self) -> None:
        with patch.dict(os.environ, {"GANTTLANE_SCALE": "month", "GANTTLANE_TZ": "UTC"}):
            self.assertEqual(load_config().scale, "month")

    def test_branding_url_schemes(self) -> None:
        self.assertEqual(load_config({"branding_url": " https://example.org/logo.png "}, env={}).branding_url,
                         "https://example.org/logo.png")
        for bad in ("javascript:alert(1)", " JaVaScRiPt:alert(1)", "java\tscript:x", "data:text/html,hi",
                    "vbscript:x", "file:///etc/passwd"):
            with self.subTest(url=bad):
                self.assertIsNone(load_config({"brandingUrl": bad}, env={}).branding_url)
        self.assertIsNone(load_config({"branding_url": "   "}, env={}).branding_url)

    def test_geometry_overrides(self) -> None:
        cfg = load_config({"geometry": {"row_height": 30, "base_lane_height": "tall", "top_margin": True}}, env={})
        self.assertEqual(cfg.geometry.row_height, 30.0)
        self.assertEqual(cfg.geometry.base_lane_height, 28.0)
        self.assertEqual(cfg.geometry.top_margin, 10.0)

        self.assertEqual(load_config({"geometry": {"row_height": 0}}, env={}).geometry, LaneGeometry())
        self.assertEqual(load_config({"geometry": "big"}, env={}).geometry, LaneGeometry())

    def test_knobs_cover_layout_inputs(self) -> None:
        k = load_config({"tz": "UTC", "offset": 2}, env={}).knobs()
        self.assertEqual(sorted(k), ["day_start_hour", "geometry", "offset", "pad_days", "scale", "tz"])
        self.assertEqual(k["geometry"]["row_height"], 24.0)

    def test_warnings_are_opt_in(self) -> None:
        with patch.dict(os.environ, {"GANTTLANE_OBS_LOG": "1"}), patch("ganttlane.config.eprint") as ep:
            load_config({"scale": "decade", "branding_url": "javascript:x"}, env={})
        msgs = [c.args[0] for c in ep.call_args_list]
        self.assertEqual(len(msgs), 2)
        self.assertTrue(all(m.startswith("[ganttlane.config] WARN:") for m in msgs))

        with patch.dict(os.environ, {"GANTTLANE_OBS_LOG": "0"}), patch("ganttlane.config.eprint") as ep:
            load_config({"scale": "decade"}, env={})
        ep.assert_not_called()


if __name__ == "__main__":
    unittest.main(verbosity=2)
