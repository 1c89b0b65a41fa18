from __future__ import annotations

import datetime as dt
import unittest

from ganttlane.edit import EDITABLE_FIELDS, EditRejected, build_update

MAPPINGS = {
    "startDate": "Debut",
    "duration": "Duree",
    "comment": "Notes",
    "contentCols": ["Titre", "Code"],
}
EDITABLE = ["Titre", "Debut", "Duree", "Notes"]


class TestEditBackContract(unittest.TestCase):
    def test_fields_map_to_host_columns(self) -> None:
        req = build_update(
            42,
            {"name": "Pour <b>slab</b>", "start": "2025-01-02T10:00:00+02:00", "duration": 2000, "comment": "ok"},
            EDITABLE,
            mappings=MAPPINGS,
        )
        self.assertEqual(req.row_id, 42)
        self.assertEqual(
            req.fields,
            {
                "Titre": "Pour &lt;b&gt;slab&lt;/b&gt;",
                "Debut": "2025-01-02T08:00:00.000Z",
                "Duree": 1000.0,
                "Notes": "ok",
            },
        )
        self.assertEqual(req.to_action("Tasks"), ["UpdateRecord", "Tasks", 42, req.fields])

    def test_logical_columns_without_mappings(self) -> None:
        req = build_update(3, {"name": "x", "duration": "0.01"}, ["name", "duration"])
        self.assertEqual(req.fields, {"name": "x", "duration": 0.1})

    def test_naive_start_uses_given_timezone(self) -> None:
        plus1 = dt.timezone(dt.timedelta(hours=1))
        req = build_update(3, {"start": "2025-01-02T10:00:00"}, ["startDate"], tz=plus1)
        self.assertEqual(req.fields, {"startDate": "2025-01-02T09:00:00.000Z"})

    def test_rejections(self) -> None:
        cases = [
            (0, {"name": "x"}),
            (-3, {"name": "x"}),
            (True, {"name": "x"}),
            (5, {}),
            (5, {"color": "#fff"}),
            (5, {"groupBy": "B"}),
            (5, {"start": "not a date"}),
            (5, {"duration": "abc"}),
        ]
        for task_id, changes in cases:
            with self.subTest(task_id=task_id, changes=changes):
                with self.assertRaises(EditRejected):
                    build_update(task_id, changes, EDITABLE + ["name", "startDate", "duration"], mappings=None)

    def test_column_must_be_declared_editable(self) -> None:
        with self.assertRaises(EditRejected):
            build_update(5, {"comment": "x"}, ["Titre"], mappings=MAPPINGS)
        with self.assertRaises(EditRejected):
            build_update(5, {"name": "x"}, [], mappings=MAPPINGS)

    def test_edit_rejected_is_a_value_error(self) -> None:
        self.assertTrue(issubclass(EditRejected, ValueError))
        self.assertEqual(sorted(EDITABLE_FIELDS), ["comment", "duration", "name", "start"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
