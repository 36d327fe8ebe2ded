"""
Tests for CLI entry points.

Every test runs against a temporary data directory
(to avoid touching the real store inside the package).
"""

import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from typing import List, Tuple

from edumanage.cli import main
from edumanage.repository import BACKUP_KEY, PRIMARY_KEY


def run_cli(data_dir: str, *args: str) -> Tuple[int, str]:
    out = io.StringIO()
    with redirect_stdout(out):
        try:
            main(["--data-dir", data_dir, *args])
        except SystemExit as e:
            return e.code, out.getvalue()
    raise AssertionError("main() must exit via SystemExit")


class TestCLI(unittest.TestCase):
    def test_first_run_lists_seed_courses(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(d, "courses")
            self.assertEqual(code, 0)
            self.assertIn("Web Development Fundamentals", out)
            self.assertIn("Sarah Johnson", out)
            self.assertTrue((Path(d) / f"{PRIMARY_KEY}.json").exists())

    def test_search_without_results(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(d, "students", "nobody-by-this-name")
            self.assertEqual(code, 0)
            self.assertIn("No results.", out)

    def test_add_course_persists(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(
                d, "add-course", "--name", "Intro to SQL", "--category", "Data Science",
                "--capacity", "20", "--instructor-id", "3",
            )
            self.assertEqual(code, 0)
            self.assertIn("Added course 6: Intro to SQL", out)

            code, out = run_cli(d, "courses", "sql")
            self.assertEqual(code, 0)
            self.assertIn("Intro to SQL | Dr. Emily Rodriguez", out)

    def test_edits_reach_the_backup_slot(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            for name in ("Zed One", "Zed Two"):
                code, _ = run_cli(d, "add-student", "--name", name)
                self.assertEqual(code, 0)

            backup = json.loads((Path(d) / f"{BACKUP_KEY}.json").read_text(encoding="utf-8"))
            self.assertEqual([s["name"] for s in backup["students"]][-2:], ["Zed One", "Zed Two"])

            # with the primary gone, the next run recovers the edits from the backup
            (Path(d) / f"{PRIMARY_KEY}.json").write_text("{broken", encoding="utf-8")
            _, out = run_cli(d, "students", "zed")
            self.assertIn("Zed Two", out)

    def test_instructor_availability_must_be_weekdays(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(d, "add-instructor", "--name", "Kai", "--availability", "monday, Funday")
            self.assertEqual(code, 1)
            self.assertIn("Unknown weekday(s): Funday", out)

            code, _ = run_cli(d, "add-instructor", "--name", "Kai", "--availability", "monday, FRIDAY")
            self.assertEqual(code, 0)
            stored = json.loads((Path(d) / f"{PRIMARY_KEY}.json").read_text(encoding="utf-8"))
            self.assertEqual(stored["instructors"][-1]["availability"], ["Monday", "Friday"])

    def test_enrollments_status_filter(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            _, out = run_cli(d, "enrollments", "--status", "Dropped")
            self.assertIn("No results.", out)
            _, out = run_cli(d, "enrollments", "emma", "--status", "Active")
            self.assertEqual(out.count("Emma Wilson"), 2)

    def test_add_course_requires_name(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(d, "add-course", "--capacity", "5")
            self.assertEqual(code, 1)
            self.assertIn("Please provide a course name.", out)

    def test_add_course_with_generated_description(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, _ = run_cli(
                d, "add-course", "--name", "Color Theory", "--category", "Design",
                "--level", "Beginner", "--ai-description",
            )
            self.assertEqual(code, 0)
            stored = json.loads((Path(d) / f"{PRIMARY_KEY}.json").read_text(encoding="utf-8"))
            course = stored["courses"][-1]
            self.assertTrue(course["aiGenerated"])
            self.assertIn("excel in design", course["description"])

    def test_enroll_errors_exit_nonzero(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(d, "enroll", "1", "1")
            self.assertEqual(code, 1)
            self.assertIn("already enrolled", out)

            code, out = run_cli(d, "enroll", "1", "99")
            self.assertEqual(code, 1)
            self.assertIn("Course 99 not found", out)

    def test_enroll_and_unenroll(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(d, "enroll", "1", "2")
            self.assertEqual(code, 0)
            self.assertIn("Enrolled: John Smith -> Advanced React Development", out)

            code, out = run_cli(d, "unenroll", "1", "2")
            self.assertEqual(code, 0)
            self.assertIn("Unenrolled", out)

            code, out = run_cli(d, "unenroll", "1", "2")
            self.assertEqual(code, 0)
            self.assertIn("Not enrolled", out)

    def test_delete_instructor_unassigns(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(d, "delete", "instructor", "2")
            self.assertEqual(code, 0)
            self.assertIn("Unassigned from 1 course(s).", out)

            _, out = run_cli(d, "courses", "react")
            self.assertIn("Unassigned", out)

    def test_delete_unknown_course(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(d, "delete", "course", "42")
            self.assertEqual(code, 1)
            self.assertIn("Course 42 not found", out)

    def test_import_export(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            export_path = Path(d) / "out" / "export.json"
            code, _ = run_cli(d, "export", str(export_path))
            self.assertEqual(code, 0)
            doc = json.loads(export_path.read_text(encoding="utf-8"))
            self.assertEqual(doc["version"], "2.0-ai")

            doc["enrollments"].append({"studentId": 999, "courseId": 1, "status": "Active"})
            doc["courses"][0]["name"] = "Renamed course"
            import_path = Path(d) / "import.json"
            import_path.write_text(json.dumps(doc), encoding="utf-8")

            code, out = run_cli(d, "import", str(import_path))
            self.assertEqual(code, 0)
            self.assertIn("10 enrollments", out)

            _, out = run_cli(d, "courses", "renamed")
            self.assertIn("Renamed course", out)

    def test_import_invalid_document(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            bad = Path(d) / "bad.json"
            bad.write_text('{"courses": []}', encoding="utf-8")
            code, out = run_cli(d, "import", str(bad))
            self.assertEqual(code, 1)
            self.assertIn("Invalid data format", out)

            code, out = run_cli(d, "import", str(Path(d) / "missing.json"))
            self.assertEqual(code, 1)
            self.assertIn("File not found", out)

            nested = Path(d) / "nested.json"
            nested.write_text("[" * 200000 + "]" * 200000, encoding="utf-8")
            code, out = run_cli(d, "import", str(nested))
            self.assertEqual(code, 1)
            self.assertIn("Invalid data format", out)

    def test_check(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(d, "check")
            self.assertEqual(code, 0)
            self.assertIn("No inconsistencies found.", out)

    def test_ai_off_disables_recommendations(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(d, "recommend", "1")
            self.assertEqual(code, 0)
            lines: List[str] = [line for line in out.splitlines() if line.strip()]
            self.assertEqual(len(lines), 2)

            run_cli(d, "ai", "off")
            code, out = run_cli(d, "recommend", "1")
            self.assertEqual(code, 0)
            self.assertIn("AI system is disabled.", out)


if __name__ == "__main__":
    unittest.main()
