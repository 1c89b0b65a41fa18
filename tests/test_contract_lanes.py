from __future__ import annotations

import unittest

from ganttlane.lanes import EMPTY_GROUP_LABEL, build_lanes, lane_index_for, lane_lookup
from ganttlane.model import Task


def _t(tid: int, g1: str, g2: str = "", start_ms: int = 0) -> Task:
    return Task(id=tid, name=f"t{tid}", start_ms=start_ms, duration_hours=1.0, group_key1=g1, group_key2=g2)


class TestGroupIndexerContract(unittest.TestCase):
    def test_header_then_subgroups_in_record_order(self) -> None:
        lanes = build_lanes([_t(1, "Team A", "X"), _t(2, "Team A", "Y")])
        self.assertEqual(
            [(l.index, l.group_key1, l.group_key2, l.is_group_header) for l in lanes],
            [(0, "Team A", "", True), (1, "Team A", "X", False), (2, "Team A", "Y", False)],
        )
        self.assertEqual([l.label for l in lanes], ["Team A", "X", "Y"])

    def test_discovery_order_not_lexical(self) -> None:
        tasks = [
            _t(1, "Zulu", "b"),
            _t(2, "Alpha"),
            _t(3, "Zulu", "a"),
            _t(4, "Alpha", "m"),
            _t(5, "Zulu", "b"),
        ]
        lanes = build_lanes(tasks)
        self.assertEqual(
            [l.key for l in lanes],
            [("Zulu", ""), ("Zulu", "b"), ("Zulu", "a"), ("Alpha", ""), ("Alpha", "m")],
        )
        self.assertEqual([l.index for l in lanes], list(range(len(lanes))))

    def test_same_subgroup_name_under_two_groups_gets_two_lanes(self) -> None:
        lanes = build_lanes([_t(1, "A", "S"), _t(2, "B", "S")])
        self.assertEqual([l.key for l in lanes], [("A", ""), ("A", "S"), ("B", ""), ("B", "S")])

    def test_empty_group_key_uses_placeholder_label(self) -> None:
        lanes = build_lanes([_t(1, ""), _t(2, "", "sub")])
        self.assertEqual(lanes[0].label, EMPTY_GROUP_LABEL)
        self.assertEqual(lanes[0].key, ("", ""))
        self.assertEqual(lanes[1].key, ("", "sub"))

    def test_no_tasks_no_lanes(self) -> None:
        self.assertEqual(build_lanes([]), [])

    def test_lookup_falls_back_to_group_header(self) -> None:
        lanes = build_lanes([_t(1, "A", "X"), _t(2, "B")])
        lookup = lane_lookup(lanes)
        self.assertEqual(lane_index_for(_t(9, "A", "X"), lookup), 1)
        self.assertEqual(lane_index_for(_t(9, "A"), lookup), 0)
        self.assertEqual(lane_index_for(_t(9, "A", "unknown"), lookup), 0)
        self.assertEqual(lane_index_for(_t(9, "B"), lookup), 2)
        self.assertEqual(lane_index_for(_t(9, "nowhere"), lookup), 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
