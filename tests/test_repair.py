"""
Unit tests for integrity repair.

Properties checked here:
- repair(repair(d)) == repair(d)
- after repair every enrollment references an existing student and course
- missing ids become 1-based positions, deterministically
- enrolled == number of Active enrollments after a recount
"""

import copy
import random
import unittest

from edumanage.model import default_ai_settings, instructor_name
from edumanage.repair import (
    audit,
    cascade_delete_course,
    cascade_delete_instructor,
    cascade_delete_student,
    looks_like_dataset,
    repair,
    update_enrollment_counts,
)
from edumanage.seed import initial_data


def _messy_dataset() -> dict:
    return {
        "courses": [
            {"name": "No id course", "instructor": "Ada"},
            {"id": 7, "name": "Course seven", "tags": None},
            "not a record",
        ],
        "students": [{"name": "Sam"}, {"id": 4, "name": "Kim", "level": ""}],
        "instructors": [{"name": "Ada", "expertise": "Python, ML, Stats"}],
        "enrollments": [
            {"studentId": 1, "courseId": 7, "status": "Active"},
            {"studentId": 999, "courseId": 7, "status": "Active"},
            {"studentId": 4, "courseId": 42, "status": "Active"},
            {"studentId": [1], "courseId": 7, "status": "Active"},
        ],
        "exportDate": "2025-01-01T00:00:00+00:00",
        "version": "2.0-ai",
    }


class TestRepair(unittest.TestCase):
    def test_repair_is_idempotent(self) -> None:
        once = repair(_messy_dataset(), rng=random.Random(1))
        twice = repair(once, rng=random.Random(2))
        self.assertEqual(once, twice)

    def test_seed_is_already_clean(self) -> None:
        self.assertEqual(repair(initial_data()), initial_data())

    def test_input_is_not_mutated(self) -> None:
        raw = _messy_dataset()
        before = copy.deepcopy(raw)
        repair(raw, rng=random.Random(0))
        self.assertEqual(raw, before)

    def test_missing_ids_get_positions(self) -> None:
        raw = {"courses": [{"name": "a"}, {"name": "b"}, {"name": "c"}], "students": [], "instructors": []}
        for seed in (1, 2):
            repaired = repair(raw, rng=random.Random(seed))
            self.assertEqual([c["id"] for c in repaired["courses"]], [1, 2, 3])

    def test_numeric_string_ids_are_accepted(self) -> None:
        raw = {"courses": [{"id": "3"}], "students": [{"id": "2"}], "instructors": []}
        repaired = repair(raw)
        self.assertEqual(repaired["courses"][0]["id"], 3)
        self.assertEqual(repaired["students"][0]["id"], 2)

    def test_referential_closure(self) -> None:
        repaired = repair(_messy_dataset(), rng=random.Random(0))
        student_ids = {s["id"] for s in repaired["students"]}
        course_ids = {c["id"] for c in repaired["courses"]}
        self.assertEqual(len(repaired["enrollments"]), 1)
        for e in repaired["enrollments"]:
            self.assertIn(e["studentId"], student_ids)
            self.assertIn(e["courseId"], course_ids)

    def test_dangling_student_enrollment_dropped(self) -> None:
        data = initial_data()
        data["enrollments"].append({"studentId": 999, "courseId": 1, "status": "Active", "progress": 0})
        repaired = repair(data)
        self.assertEqual(len(repaired["enrollments"]), 10)
        self.assertNotIn(999, {e["studentId"] for e in repaired["enrollments"]})

    def test_legacy_expertise_string_is_split(self) -> None:
        repaired = repair(_messy_dataset(), rng=random.Random(0))
        self.assertEqual(repaired["instructors"][0]["expertise"], ["Python", "ML", "Stats"])

    def test_collections_are_coerced(self) -> None:
        repaired = repair({"courses": "oops", "students": None, "instructors": {}})
        for name in ("courses", "students", "instructors", "categories", "enrollments"):
            self.assertEqual(repaired[name], [])
        self.assertEqual(repaired["aiSettings"], default_ai_settings())

    def test_partial_settings_are_completed(self) -> None:
        raw = {"courses": [], "students": [], "instructors": [], "aiSettings": {"enabled": False}}
        settings = repair(raw)["aiSettings"]
        self.assertFalse(settings["enabled"])
        self.assertEqual(settings["confidenceThreshold"], 0.7)

    def test_defaults_are_filled(self) -> None:
        repaired = repair(_messy_dataset(), rng=random.Random(3))

        course = repaired["courses"][1]
        self.assertFalse(course["aiGenerated"])
        self.assertEqual(course["tags"], [])
        self.assertTrue(60 <= course["popularity"] < 100)

        sam, kim = repaired["students"]
        self.assertEqual(sam["courses"], [])
        self.assertEqual(kim["level"], "Beginner")
        self.assertEqual(sam["learningPath"], [])

        instructor = repaired["instructors"][0]
        self.assertFalse(instructor["aiOptimized"])
        self.assertEqual(instructor["availability"], [])
        self.assertTrue(4.0 <= instructor["rating"] <= 5.0)

        enrollment = repaired["enrollments"][0]
        self.assertIn(enrollment["aiSuggested"], (True, False))
        self.assertTrue(0 <= enrollment["progress"] <= 99)

    def test_randomized_defaults_follow_the_seed(self) -> None:
        a = repair(_messy_dataset(), rng=random.Random(42))
        b = repair(_messy_dataset(), rng=random.Random(42))
        self.assertEqual(a, b)

    def test_legacy_instructor_name_backfills_id(self) -> None:
        repaired = repair(_messy_dataset(), rng=random.Random(0))
        course = repaired["courses"][0]
        self.assertNotIn("instructor", course)
        self.assertEqual(course["instructorId"], 1)
        self.assertEqual(instructor_name(course, repaired["instructors"]), "Ada")
        self.assertIsNone(repaired["courses"][1]["instructorId"])

    def test_unrecognized_top_level_keys_are_ignored(self) -> None:
        repaired = repair(_messy_dataset(), rng=random.Random(0))
        self.assertNotIn("exportDate", repaired)
        self.assertNotIn("version", repaired)


class TestLooksLikeDataset(unittest.TestCase):
    def test_sniff(self) -> None:
        self.assertTrue(looks_like_dataset({"courses": [], "students": [], "instructors": []}))
        self.assertFalse(looks_like_dataset({"courses": [], "students": []}))
        self.assertFalse(looks_like_dataset({"courses": "", "students": "", "instructors": ""}))
        self.assertFalse(looks_like_dataset({"courses": [], "students": [], "instructors": {}}))
        self.assertFalse(looks_like_dataset([1, 2, 3]))
        self.assertFalse(looks_like_dataset(None))


class TestEnrollmentCounts(unittest.TestCase):
    def test_counts_active_enrollments_only(self) -> None:
        data = repair(
            {
                "courses": [{"id": 9, "name": "Nine", "capacity": 2, "enrolled": 0}],
                "students": [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}],
                "instructors": [],
                "enrollments": [
                    {"studentId": 1, "courseId": 9, "status": "Active"},
                    {"studentId": 2, "courseId": 9, "status": "Active"},
                    {"studentId": 2, "courseId": 9, "status": "Completed"},
                ],
            }
        )
        update_enrollment_counts(data)
        self.assertEqual(data["courses"][0]["enrolled"], 2)


class TestAudit(unittest.TestCase):
    def test_seed_has_no_findings(self) -> None:
        self.assertEqual(audit(repair(initial_data())), [])

    def test_student_course_drift_is_reported_not_fixed(self) -> None:
        data = initial_data()
        data["enrollments"] = [e for e in data["enrollments"] if not (e["studentId"] == 1 and e["courseId"] == 3)]
        repaired = repair(data)

        # repair leaves the student's list alone
        self.assertEqual(repaired["students"][0]["courses"], [1, 3])
        findings = audit(repaired)
        self.assertEqual(findings, ["Student 1 lists course 3 without an active enrollment"])


class TestCascadeDeletes(unittest.TestCase):
    def test_delete_course(self) -> None:
        data = repair(initial_data())
        cascade_delete_course(data, 1)
        self.assertNotIn(1, [c["id"] for c in data["courses"]])
        self.assertNotIn(1, [e["courseId"] for e in data["enrollments"]])
        for s in data["students"]:
            self.assertNotIn(1, s["courses"])
        self.assertEqual(data["instructors"][0]["courses"], [])

    def test_delete_student(self) -> None:
        data = repair(initial_data())
        cascade_delete_student(data, 2)
        self.assertNotIn(2, [s["id"] for s in data["students"]])
        self.assertNotIn(2, [e["studentId"] for e in data["enrollments"]])
        self.assertEqual(len(data["enrollments"]), 8)

    def test_delete_instructor_keeps_courses(self) -> None:
        data = repair(initial_data())
        cascade_delete_instructor(data, 2)
        self.assertEqual(len(data["courses"]), 5)
        course = data["courses"][1]
        self.assertIsNone(course["instructorId"])
        self.assertEqual(instructor_name(course, data["instructors"]), "Unassigned")


if __name__ == "__main__":
    unittest.main()
