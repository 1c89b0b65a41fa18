from __future__ import annotations

import datetime as dt
import unittest

from ganttlane.model import Lane, PositionedTask, Task, Window
from ganttlane.viewport import LaneGeometry, clip_to_window, lane_layout, project_visible

UTC = dt.timezone.utc
HOUR = 3600 * 1000


def _ms(*args: int) -> int:
    return int(dt.datetime(*args, tzinfo=UTC).timestamp() * 1000)


WEEK = Window(min_ms=_ms(2024, 12, 30), max_ms=_ms(2025, 1, 6), scale="week", offset=0)


def _pt(tid: int, start_ms: int, hours: float, lane: int, row: int = 0) -> PositionedTask:
    task = Task(id=tid, name=f"t{tid}", start_ms=start_ms, duration_hours=hours)
    return PositionedTask(task=task, lane_index=lane, sub_row_index=row)


LANES = [
    Lane(index=0, group_key1="A", group_key2="", label="A", is_group_header=True),
    Lane(index=1, group_key1="A", group_key2="X", label="X", is_group_header=False),
]


class TestViewportContract(unittest.TestCase):
    def test_lane_stacking_with_default_geometry(self) -> None:
        layout = lane_layout(LANES, {0: 1, 1: 2}, LaneGeometry())
        self.assertEqual(layout[0], (10.0, 28.0))
        self.assertEqual(layout[1], (44.0, 60.0))

    def test_label_height_can_grow_a_lane(self) -> None:
        layout = lane_layout(LANES, {0: 1, 1: 2}, LaneGeometry(), label_heights={0: 40})
        self.assertEqual(layout[0], (10.0, 40.0))
        self.assertEqual(layout[1][0], 56.0)

        # A short label never shrinks the lane below what its rows need.
        layout = lane_layout(LANES, {0: 1, 1: 2}, LaneGeometry(), label_heights={1: 12})
        self.assertEqual(layout[1][1], 60.0)

    def test_bars_are_centered_and_stacked_by_sub_row(self) -> None:
        mon = _ms(2024, 12, 30, 9)
        positioned = [
            _pt(1, mon, 2, lane=0),
            _pt(2, mon, 2, lane=1, row=0),
            _pt(3, mon + HOUR, 2, lane=1, row=1),
        ]
        visible, metrics = project_visible(positioned, WEEK, LANES)
        tops = {v.task.id: v.top_px for v in visible}
        self.assertEqual(tops, {1: 12.0, 2: 48.0, 3: 76.0})
        self.assertTrue(all(v.height_px == 24.0 for v in visible))

        self.assertEqual([(m.lane_index, m.rows, m.task_count) for m in metrics], [(0, 1, 1), (1, 2, 2)])
        self.assertEqual(metrics[1].duration_hours, 4.0)

    def test_percentages_inside_window(self) -> None:
        visible, _ = project_visible([_pt(1, _ms(2025, 1, 2), 24, lane=0)], WEEK, LANES)
        (v,) = visible
        self.assertAlmostEqual(v.left_percent, 3 / 7 * 100.0)
        self.assertAlmostEqual(v.width_percent, 1 / 7 * 100.0)

    def test_clipping_at_window_edges(self) -> None:
        positioned = [
            _pt(1, WEEK.min_ms - 2 * HOUR, 5, lane=0),  # straddles start
            _pt(2, WEEK.max_ms - HOUR, 5, lane=0),  # straddles end
            _pt(3, WEEK.min_ms - 5 * HOUR, 5, lane=0),  # ends exactly at start
            _pt(4, WEEK.max_ms, 1, lane=0),  # starts exactly at end
        ]
        visible, metrics = project_visible(positioned, WEEK, LANES)
        by_id = {v.task.id: v for v in visible}
        self.assertEqual(sorted(by_id), [1, 2])

        self.assertEqual((by_id[1].visible_start_ms, by_id[1].visible_end_ms), (WEEK.min_ms, WEEK.min_ms + 3 * HOUR))
        self.assertEqual(by_id[1].left_percent, 0.0)
        self.assertEqual((by_id[2].visible_start_ms, by_id[2].visible_end_ms), (WEEK.max_ms - HOUR, WEEK.max_ms))
        self.assertAlmostEqual(by_id[2].left_percent + by_id[2].width_percent, 100.0)

        for v in visible:
            self.assertGreaterEqual(v.left_percent, 0.0)
            self.assertLessEqual(v.left_percent + v.width_percent, 100.0 + 1e-9)

        # Lane metrics still count hidden tasks.
        self.assertEqual(metrics[0].task_count, 4)

    def test_lane_totals_sum_total_columns(self) -> None:
        mon = _ms(2024, 12, 30, 9)
        a = Task(id=1, name="a", start_ms=mon, duration_hours=1, totals=(("cost", 10.0), ("hours", 1.5)))
        b = Task(id=2, name="b", start_ms=mon, duration_hours=1, totals=(("hours", 2.25), ("crew", 3.0)))
        c = Task(id=3, name="c", start_ms=WEEK.max_ms + HOUR, duration_hours=1, totals=(("cost", 0.1), ("cost2", 0.2)))
        positioned = [
            PositionedTask(task=a, lane_index=1, sub_row_index=0),
            PositionedTask(task=b, lane_index=1, sub_row_index=1),
            PositionedTask(task=c, lane_index=0, sub_row_index=0),
        ]
        _, metrics = project_visible(positioned, WEEK, LANES)
        self.assertEqual(metrics[1].totals, (("cost", 10.0), ("hours", 3.75), ("crew", 3.0)))
        self.assertEqual(metrics[1].to_dict()["totals"], {"cost": 10.0, "hours": 3.75, "crew": 3.0})
        # Hidden tasks still count.
        self.assertEqual(dict(metrics[0].totals), {"cost": 0.1, "cost2": 0.2})

    def test_clip_to_window(self) -> None:
        self.assertIsNone(clip_to_window(0, WEEK.min_ms, WEEK))
        self.assertEqual(clip_to_window(WEEK.min_ms, WEEK.max_ms, WEEK), (WEEK.min_ms, WEEK.max_ms))

    def test_geometry_rejects_non_positive_row_height(self) -> None:
        with self.assertRaises(ValueError):
            LaneGeometry(row_height=0)
        with self.assertRaises(ValueError):
            LaneGeometry(sub_row_gap=-1)
        self.assertEqual(LaneGeometry().rows_height(3), 3 * 28 + 2 * 4)


if __name__ == "__main__":
    unittest.main(verbosity=2)
