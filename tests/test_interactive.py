"""
Tests for the interactive menu with scripted prompt answers.
"""

import random
import unittest
from typing import List
from unittest import mock

from edumanage.interactive import run_interactive
from edumanage.repository import Repository


class MemoryStore:
    def __init__(self) -> None:
        self.values = {}

    def probe(self) -> bool:
        return True

    def read(self, key):
        return self.values.get(key)

    def write(self, key, value) -> bool:
        self.values[key] = value
        return True


class CountingAutoSaver:
    def __init__(self, repo: Repository) -> None:
        self.repo = repo
        self.touches = 0
        self.flushed = False

    def __enter__(self) -> "CountingAutoSaver":
        return self

    def __exit__(self, *exc: object) -> None:
        self.flushed = True

    def touch(self) -> None:
        self.touches += 1


class TestInteractive(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = Repository(MemoryStore(), rng=random.Random(0))
        self.repo.load()
        self.savers: List[CountingAutoSaver] = []
        self.output: List[str] = []

    def _factory(self, repo: Repository) -> CountingAutoSaver:
        saver = CountingAutoSaver(repo)
        self.savers.append(saver)
        return saver

    def _run(self, answers: List[str]) -> None:
        with mock.patch("edumanage.interactive._prompt", side_effect=answers), mock.patch(
            "edumanage.interactive._println", side_effect=lambda msg="": self.output.append(msg)
        ):
            run_interactive(self.repo, autosaver_factory=self._factory)

    def test_add_course_touches_autosaver(self) -> None:
        self._run(
            ["5", "Intro to SQL", "Data Science", "Beginner", "20", "0", "", "", "", "n", "Queries and joins", "0"]
        )

        course = self.repo.get_course(6)
        self.assertEqual(course["name"], "Intro to SQL")
        self.assertEqual(course["capacity"], 20)
        self.assertEqual(course["description"], "Queries and joins")
        self.assertFalse(course["aiGenerated"])
        self.assertEqual(self.savers[0].touches, 1)
        self.assertTrue(self.savers[0].flushed)

    def test_enrollment_error_is_reported(self) -> None:
        self._run(["8", "1", "1", "0"])

        self.assertIn("Error: Student is already enrolled in this course", self.output)
        self.assertEqual(self.savers[0].touches, 0)

    def test_check(self) -> None:
        self._run(["14", "0"])
        self.assertIn("No inconsistencies found.", self.output)


if __name__ == "__main__":
    unittest.main()
