"""
Unit tests for generated descriptions, bios and course recommendations.
"""

import random
import unittest

from edumanage.repair import repair, update_enrollment_counts
from edumanage.seed import initial_data
from edumanage.templates import (
    DESCRIPTIONS,
    LEVEL_MODIFIERS,
    confidence_score,
    describe_course,
    instructor_bio,
    recommend_courses,
)


def _seed() -> dict:
    data = repair(initial_data())
    update_enrollment_counts(data)
    return data


class TestDescriptions(unittest.TestCase):
    def test_describe_course(self) -> None:
        text = describe_course("Data Science", "Advanced", rng=random.Random(1))

        self.assertTrue(any(text.startswith(s) for s in DESCRIPTIONS["Data Science"]))
        self.assertIn(LEVEL_MODIFIERS["Advanced"], text)
        self.assertTrue(text.endswith("excel in data science."))

    def test_unknown_category_falls_back(self) -> None:
        text = describe_course("Cooking", "Beginner", rng=random.Random(1))
        self.assertTrue(any(text.startswith(s) for s in DESCRIPTIONS["Programming"]))
        self.assertIn("excel in cooking", text)

    def test_same_seed_same_text(self) -> None:
        a = describe_course("Design", "Intermediate", rng=random.Random(5))
        b = describe_course("Design", "Intermediate", rng=random.Random(5))
        self.assertEqual(a, b)

    def test_confidence_score_range(self) -> None:
        rng = random.Random(0)
        for _ in range(50):
            self.assertTrue(85 <= confidence_score(rng) <= 99)

    def test_instructor_bio(self) -> None:
        bio = instructor_bio("Kai Lee", "Design", 4, "Figma", rng=random.Random(2))
        self.assertIn("Kai Lee", bio)
        self.assertIn("design", bio)
        self.assertIn("Figma", bio)


class TestRecommendations(unittest.TestCase):
    def test_only_open_active_unheld_courses(self) -> None:
        recs = recommend_courses(_seed(), 1, rng=random.Random(0))

        # student 1 holds 1 and 3; course 5 is Upcoming
        self.assertEqual(sorted(r["course"]["id"] for r in recs), [2, 4])
        confidences = [r["confidence"] for r in recs]
        self.assertEqual(confidences, sorted(confidences, reverse=True))
        for r in recs:
            self.assertTrue(r["reason"])

    def test_full_courses_are_skipped(self) -> None:
        data = _seed()
        data["courses"][1]["capacity"] = data["courses"][1]["enrolled"]
        recs = recommend_courses(data, 1, rng=random.Random(0))
        self.assertEqual([r["course"]["id"] for r in recs], [4])

    def test_limit(self) -> None:
        data = _seed()
        data["students"][0]["courses"] = []
        recs = recommend_courses(data, 1, rng=random.Random(0), limit=2)
        self.assertEqual(len(recs), 2)

    def test_disabled_or_unknown_student(self) -> None:
        data = _seed()
        self.assertEqual(recommend_courses(data, 99), [])
        data["aiSettings"]["enabled"] = False
        self.assertEqual(recommend_courses(data, 1), [])


if __name__ == "__main__":
    unittest.main()
