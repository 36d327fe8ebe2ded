"""
CLI (Command Line Interface).

Quick terminal commands for power users and for testing, e.g.:

    edumanage courses [text]
    edumanage add-course --name "Intro to SQL" --category "Data Science" --capacity 20
    edumanage enroll <student_id> <course_id>
    edumanage delete course <course_id>
    edumanage export [file.json]
    edumanage import <file-or-url>
    edumanage check
    edumanage interactive

Every command loads the dataset through the repository (primary slot, backup
slot or seed), runs, and exits via SystemExit with a return code.

Note:
- The interactive UI lives in edumanage/interactive.py
- This CLI prints plain text (no rich formatting)
"""

from __future__ import annotations

import argparse
import logging
from typing import Any, Callable, Dict, List

from edumanage import templates
from edumanage.errors import EduManageError
from edumanage.exchange import default_export_name, export_to_file, read_import_source
from edumanage.model import (
    COURSE_STATUSES,
    ENROLLMENT_STATUSES,
    LEVELS,
    PERSON_STATUSES,
    WEEKDAYS,
    Course,
    Instructor,
    Student,
    find_by_id,
    instructor_name,
)
from edumanage.repair import audit
from edumanage.repository import Repository
from edumanage.search import filter_courses, filter_enrollments, filter_instructors, filter_students
from edumanage.storage import KeyValueStore


def open_repository(data_dir: str | None = None) -> Repository:
    """
    Create the repository for `data_dir` and load the dataset.

    If the store cannot be used, warn once; the session then works in memory.
    """
    repo = Repository(KeyValueStore(data_dir))
    if not repo.storage_available:
        print("Warning: storage not available, changes will not survive a restart.")
    repo.load()
    return repo


def _split_csv(text: str | None) -> List[str]:
    if not text:
        return []
    return [s.strip() for s in text.split(",") if s.strip()]


def _report_save(repo: Repository) -> None:
    # Not fatal: in-memory state stays authoritative, the next save retries.
    if repo.storage_available and repo.last_save_ok is False:
        print("Warning: save failed, changes may not survive a restart.")


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def course_line(course: Dict[str, Any], data: Dict[str, Any]) -> str:
    bits = [
        str(course.get("id")),
        str(course.get("name") or "(no name)"),
        instructor_name(course, data["instructors"]),
        str(course.get("category") or ""),
        str(course.get("level") or ""),
        str(course.get("status") or ""),
        f"{course.get('enrolled', 0)}/{course.get('capacity', '?')} enrolled",
        f"${course.get('price', 0)}",
    ]
    if course.get("aiGenerated"):
        bits.append("AI")
    return " | ".join(b for b in bits if b)


def student_line(student: Dict[str, Any]) -> str:
    n = len(student.get("courses") or [])
    bits = [
        str(student.get("id")),
        str(student.get("name") or "(no name)"),
        str(student.get("email") or ""),
        str(student.get("level") or ""),
        str(student.get("status") or ""),
        f"{n} courses",
    ]
    return " | ".join(b for b in bits if b)


def instructor_line(instructor: Dict[str, Any]) -> str:
    n = len(instructor.get("courses") or [])
    bits = [
        str(instructor.get("id")),
        str(instructor.get("name") or "(no name)"),
        str(instructor.get("department") or ""),
        ", ".join(instructor.get("expertise") or []),
        f"rating {instructor.get('rating')}",
        f"{n} courses",
    ]
    return " | ".join(b for b in bits if b)


def enrollment_line(enrollment: Dict[str, Any], data: Dict[str, Any]) -> str:
    student = find_by_id(data["students"], enrollment.get("studentId")) or {}
    course = find_by_id(data["courses"], enrollment.get("courseId")) or {}
    bits = [
        f"{student.get('name', '?')} ({enrollment.get('studentId')})",
        f"{course.get('name', '?')} ({enrollment.get('courseId')})",
        str(enrollment.get("status") or ""),
        f"{enrollment.get('progress', 0)}%",
        str(enrollment.get("enrollmentDate") or ""),
    ]
    if enrollment.get("aiSuggested"):
        bits.append("AI")
    return " | ".join(b for b in bits if b)


def _print_lines(lines: List[str]) -> None:
    if not lines:
        print("No results.")
        return
    for line in lines:
        print(line)


# ---------------------------------------------------------------------------
# Commands: listing
# ---------------------------------------------------------------------------


def _cmd_courses(args: argparse.Namespace, repo: Repository) -> int:
    data = repo.data
    courses = filter_courses(data, args.text, category=args.category, status=args.status)
    _print_lines([course_line(c, data) for c in courses])
    return 0


def _cmd_students(args: argparse.Namespace, repo: Repository) -> int:
    students = filter_students(repo.data, args.text, status=args.status)
    _print_lines([student_line(s) for s in students])
    return 0


def _cmd_instructors(args: argparse.Namespace, repo: Repository) -> int:
    instructors = filter_instructors(repo.data, args.text, department=args.department)
    _print_lines([instructor_line(i) for i in instructors])
    return 0


def _cmd_enrollments(args: argparse.Namespace, repo: Repository) -> int:
    data = repo.data
    enrollments = filter_enrollments(data, args.text, course_id=args.course, status=args.status)
    _print_lines([enrollment_line(e, data) for e in enrollments])
    return 0


# ---------------------------------------------------------------------------
# Commands: add / update / delete
# ---------------------------------------------------------------------------


def _course_fields(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Collect course fields given on the command line (unset options are skipped).
    """
    fields = {
        "name": args.name,
        "description": args.description,
        "instructorId": args.instructor_id,
        "category": args.category,
        "level": args.level,
        "status": args.status,
        "capacity": args.capacity,
        "price": args.price,
        "startDate": args.start,
        "endDate": args.end,
        "duration": args.duration,
        "tags": _split_csv(args.tags) if args.tags is not None else None,
    }
    return {k: v for k, v in fields.items() if v is not None}


def _student_fields(args: argparse.Namespace) -> Dict[str, Any]:
    fields = {
        "name": args.name,
        "email": args.email,
        "phone": args.phone,
        "address": args.address,
        "level": args.level,
        "status": args.status,
        "interests": _split_csv(args.interests) if args.interests is not None else None,
    }
    return {k: v for k, v in fields.items() if v is not None}


def _instructor_fields(args: argparse.Namespace) -> Dict[str, Any]:
    fields = {
        "name": args.name,
        "email": args.email,
        "phone": args.phone,
        "department": args.department,
        "expertise": _split_csv(args.expertise) if args.expertise is not None else None,
        "experience": args.experience,
        "bio": args.bio,
        "status": args.status,
        "availability": _split_csv(args.availability) if args.availability is not None else None,
    }
    return {k: v for k, v in fields.items() if v is not None}


def _normalize_availability(fields: Dict[str, Any]) -> bool:
    """
    Map availability entries to canonical weekday names ("mon" is not accepted,
    "monday" is). Returns False and prints the offenders if any are unknown.
    """
    if "availability" not in fields:
        return True
    by_lower = {d.lower(): d for d in WEEKDAYS}
    unknown = [d for d in fields["availability"] if d.lower() not in by_lower]
    if unknown:
        print(f"Unknown weekday(s): {', '.join(unknown)}")
        return False
    fields["availability"] = [by_lower[d.lower()] for d in fields["availability"]]
    return True


def _apply_ai_description(args: argparse.Namespace, repo: Repository, record: Dict[str, Any]) -> None:
    if not args.ai_description:
        return
    if not repo.data["aiSettings"].get("enabled", True):
        print("AI system is disabled; description not generated.")
        return
    if not record.get("category") or not record.get("level"):
        print("Please provide category and level to generate a description.")
        return
    record["description"] = templates.describe_course(record["category"], record["level"])
    record["aiGenerated"] = True


def _apply_ai_bio(args: argparse.Namespace, repo: Repository, record: Dict[str, Any]) -> None:
    if not args.ai_bio:
        return
    if not repo.data["aiSettings"].get("enabled", True):
        print("AI system is disabled; bio not generated.")
        return
    record["bio"] = templates.instructor_bio(
        record.get("name", ""),
        record.get("department", ""),
        record.get("experience", 0),
        ", ".join(record.get("expertise") or []),
    )


def _cmd_add_course(args: argparse.Namespace, repo: Repository) -> int:
    if not (args.name or "").strip():
        print("Please provide a course name.")
        return 1
    record = Course(name=args.name.strip()).to_dict()
    del record["id"], record["enrolled"]
    record.update(_course_fields(args))
    _apply_ai_description(args, repo, record)

    course = repo.add_course(record)
    print(f"Added course {course['id']}: {course['name']}")
    _report_save(repo)
    return 0


def _cmd_update_course(args: argparse.Namespace, repo: Repository) -> int:
    existing = repo.get_course(args.id)
    if existing is None:
        print(f"Course {args.id} not found.")
        return 1
    record = dict(existing)
    record.update(_course_fields(args))
    _apply_ai_description(args, repo, record)

    course = repo.update_course(args.id, record)
    print(f"Updated course {course['id']}: {course['name']}")
    _report_save(repo)
    return 0


def _cmd_add_student(args: argparse.Namespace, repo: Repository) -> int:
    if not (args.name or "").strip():
        print("Please provide a student name.")
        return 1
    record = Student(name=args.name.strip()).to_dict()
    del record["id"]
    record.update(_student_fields(args))

    student = repo.add_student(record)
    print(f"Added student {student['id']}: {student['name']}")
    _report_save(repo)
    return 0


def _cmd_update_student(args: argparse.Namespace, repo: Repository) -> int:
    existing = repo.get_student(args.id)
    if existing is None:
        print(f"Student {args.id} not found.")
        return 1
    record = dict(existing)
    record.update(_student_fields(args))

    student = repo.update_student(args.id, record)
    print(f"Updated student {student['id']}: {student['name']}")
    _report_save(repo)
    return 0


def _cmd_add_instructor(args: argparse.Namespace, repo: Repository) -> int:
    if not (args.name or "").strip():
        print("Please provide an instructor name.")
        return 1
    record = Instructor(name=args.name.strip()).to_dict()
    # rating and joinDate are assigned by the repository
    for key in ("id", "rating", "joinDate"):
        del record[key]
    fields = _instructor_fields(args)
    if not _normalize_availability(fields):
        return 1
    record.update(fields)
    _apply_ai_bio(args, repo, record)

    instructor = repo.add_instructor(record)
    print(f"Added instructor {instructor['id']}: {instructor['name']}")
    _report_save(repo)
    return 0


def _cmd_update_instructor(args: argparse.Namespace, repo: Repository) -> int:
    existing = repo.get_instructor(args.id)
    if existing is None:
        print(f"Instructor {args.id} not found.")
        return 1
    fields = _instructor_fields(args)
    if not _normalize_availability(fields):
        return 1
    record = dict(existing)
    record.update(fields)
    _apply_ai_bio(args, repo, record)

    instructor = repo.update_instructor(args.id, record)
    print(f"Updated instructor {instructor['id']}: {instructor['name']}")
    _report_save(repo)
    return 0


def _cmd_delete(args: argparse.Namespace, repo: Repository) -> int:
    if args.kind == "course":
        course = repo.delete_course(args.id)
        print(f"Deleted course {args.id}: {course.get('name')} (related enrollments removed)")
    elif args.kind == "student":
        student = repo.delete_student(args.id)
        print(f"Deleted student {args.id}: {student.get('name')} (enrollments removed)")
    else:
        unassigned = repo.delete_instructor(args.id)
        print(f"Deleted instructor {args.id}")
        if unassigned:
            print(f"Unassigned from {len(unassigned)} course(s).")
    _report_save(repo)
    return 0


# ---------------------------------------------------------------------------
# Commands: enrollments, recommendations, settings
# ---------------------------------------------------------------------------


def _cmd_enroll(args: argparse.Namespace, repo: Repository) -> int:
    repo.enroll(args.student_id, args.course_id, ai_suggested=args.ai)
    student = repo.get_student(args.student_id) or {}
    course = repo.get_course(args.course_id) or {}
    print(f"Enrolled: {student.get('name')} -> {course.get('name')}")
    _report_save(repo)
    return 0


def _cmd_unenroll(args: argparse.Namespace, repo: Repository) -> int:
    removed = repo.unenroll(args.student_id, args.course_id)
    if not removed:
        print(f"Not enrolled: student {args.student_id} in course {args.course_id}")
        return 0
    print(f"Unenrolled: student {args.student_id} from course {args.course_id}")
    _report_save(repo)
    return 0


def _cmd_recommend(args: argparse.Namespace, repo: Repository) -> int:
    data = repo.data
    if not data["aiSettings"].get("enabled", True):
        print("AI system is disabled.")
        return 0
    if repo.get_student(args.student_id) is None:
        print(f"Student {args.student_id} not found.")
        return 1

    recs = templates.recommend_courses(data, args.student_id)
    if not recs:
        print("No recommendations.")
        return 0
    for rec in recs:
        c = rec["course"]
        print(f"{c['id']} | {c.get('name')} | {rec['reason']} | {round(rec['confidence'] * 100)}%")
    return 0


def _cmd_ai(args: argparse.Namespace, repo: Repository) -> int:
    enabled = args.state == "on"
    repo.set_ai_enabled(enabled)
    print("AI system activated" if enabled else "AI system deactivated")
    _report_save(repo)
    return 0


# ---------------------------------------------------------------------------
# Commands: import / export / check
# ---------------------------------------------------------------------------


def _cmd_export(args: argparse.Namespace, repo: Repository) -> int:
    out_path = (args.out or "").strip() or default_export_name()
    try:
        out = export_to_file(repo, out_path)
    except OSError as e:
        print(f"Error exporting data: {e}")
        return 1
    print(f"Exported data to: {out}")
    return 0


def _cmd_import(args: argparse.Namespace, repo: Repository) -> int:
    text = read_import_source(args.source)
    if not repo.import_text(text):
        print("Invalid data format: expected JSON with courses, students and instructors.")
        return 1
    data = repo.data
    print(
        f"Data imported: {len(data['courses'])} courses, {len(data['students'])} students, "
        f"{len(data['instructors'])} instructors, {len(data['enrollments'])} enrollments"
    )
    _report_save(repo)
    return 0


def _cmd_check(args: argparse.Namespace, repo: Repository) -> int:
    findings = audit(repo.data)
    if not findings:
        print("No inconsistencies found.")
        return 0
    print(f"Inconsistencies found: {len(findings)}")
    for f in findings:
        print(f"- {f}")
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_course_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--name", type=str, help="Course name")
    p.add_argument("--description", type=str)
    p.add_argument("--instructor-id", type=int, help="Instructor ID")
    p.add_argument("--category", type=str, help="e.g. Programming, Data Science, Marketing, Design")
    p.add_argument("--level", choices=LEVELS)
    p.add_argument("--status", choices=COURSE_STATUSES)
    p.add_argument("--capacity", type=int)
    p.add_argument("--price", type=float)
    p.add_argument("--start", type=str, help="Start date (YYYY-MM-DD)")
    p.add_argument("--end", type=str, help="End date (YYYY-MM-DD)")
    p.add_argument("--duration", type=str, help="e.g. '8 weeks'")
    p.add_argument("--tags", type=str, help="Comma-separated tags")
    p.add_argument("--ai-description", action="store_true", help="Generate the description")


def _add_student_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--name", type=str)
    p.add_argument("--email", type=str)
    p.add_argument("--phone", type=str)
    p.add_argument("--address", type=str)
    p.add_argument("--level", choices=LEVELS)
    p.add_argument("--status", choices=PERSON_STATUSES)
    p.add_argument("--interests", type=str, help="Comma-separated interests")


def _add_instructor_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--name", type=str)
    p.add_argument("--email", type=str)
    p.add_argument("--phone", type=str)
    p.add_argument("--department", type=str)
    p.add_argument("--expertise", type=str, help="Comma-separated skills")
    p.add_argument("--experience", type=int, help="Years of experience")
    p.add_argument("--bio", type=str)
    p.add_argument("--status", choices=PERSON_STATUSES)
    p.add_argument("--availability", type=str, help="Comma-separated weekdays")
    p.add_argument("--ai-bio", action="store_true", help="Generate the bio")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="edumanage", description="EduManage CLI")
    parser.add_argument("--data-dir", type=str, default=None, help="Directory of the data store")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log storage activity")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("courses", help="List/search courses")
    p.add_argument("text", nargs="?", default="", help="Search text")
    p.add_argument("--category", type=str)
    p.add_argument("--status", choices=COURSE_STATUSES)

    p = sub.add_parser("students", help="List/search students")
    p.add_argument("text", nargs="?", default="", help="Search text")
    p.add_argument("--status", choices=PERSON_STATUSES)

    p = sub.add_parser("instructors", help="List/search instructors")
    p.add_argument("text", nargs="?", default="", help="Search text")
    p.add_argument("--department", type=str)

    p = sub.add_parser("enrollments", help="List/search enrollments")
    p.add_argument("text", nargs="?", default="", help="Search text (student or course name)")
    p.add_argument("--course", type=int, help="Only this course ID")
    p.add_argument("--status", choices=ENROLLMENT_STATUSES)

    _add_course_options(sub.add_parser("add-course", help="Add a course"))
    p = sub.add_parser("update-course", help="Update a course")
    p.add_argument("id", type=int)
    _add_course_options(p)

    _add_student_options(sub.add_parser("add-student", help="Add a student"))
    p = sub.add_parser("update-student", help="Update a student")
    p.add_argument("id", type=int)
    _add_student_options(p)

    _add_instructor_options(sub.add_parser("add-instructor", help="Add an instructor"))
    p = sub.add_parser("update-instructor", help="Update an instructor")
    p.add_argument("id", type=int)
    _add_instructor_options(p)

    p = sub.add_parser("delete", help="Delete a course, student or instructor")
    p.add_argument("kind", choices=("course", "student", "instructor"))
    p.add_argument("id", type=int)

    p = sub.add_parser("enroll", help="Enroll a student in a course")
    p.add_argument("student_id", type=int)
    p.add_argument("course_id", type=int)
    p.add_argument("--ai", action="store_true", help="Mark as AI-suggested")

    p = sub.add_parser("unenroll", help="Unenroll a student from a course")
    p.add_argument("student_id", type=int)
    p.add_argument("course_id", type=int)

    p = sub.add_parser("recommend", help="Course recommendations for a student")
    p.add_argument("student_id", type=int)

    p = sub.add_parser("ai", help="Switch the AI features on or off")
    p.add_argument("state", choices=("on", "off"))

    p = sub.add_parser("export", help="Export all data to a JSON file")
    p.add_argument("out", nargs="?", default="", help="Output file (default: edumanage_ai_export_<date>.json)")

    p = sub.add_parser("import", help="Import data from a JSON file or URL")
    p.add_argument("source", type=str, help="File path or http(s) URL")

    sub.add_parser("check", help="Report data inconsistencies")
    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


COMMANDS: Dict[str, Callable[[argparse.Namespace, Repository], int]] = {
    "courses": _cmd_courses,
    "students": _cmd_students,
    "instructors": _cmd_instructors,
    "enrollments": _cmd_enrollments,
    "add-course": _cmd_add_course,
    "update-course": _cmd_update_course,
    "add-student": _cmd_add_student,
    "update-student": _cmd_update_student,
    "add-instructor": _cmd_add_instructor,
    "update-instructor": _cmd_update_instructor,
    "delete": _cmd_delete,
    "enroll": _cmd_enroll,
    "unenroll": _cmd_unenroll,
    "recommend": _cmd_recommend,
    "ai": _cmd_ai,
    "export": _cmd_export,
    "import": _cmd_import,
    "check": _cmd_check,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, loads the repository, dispatches to the
    command handler and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    repo = open_repository(args.data_dir)

    # Leaving the repository runs the forced teardown save (primary + backup).
    with repo:
        if args.command == "interactive":
            from edumanage.interactive import run_interactive

            run_interactive(repo)
            raise SystemExit(0)

        handler = COMMANDS.get(args.command)
        if handler is None:
            raise SystemExit(2)

        try:
            code = handler(args, repo)
        except EduManageError as e:
            print(str(e))
            code = 1
    raise SystemExit(code)
