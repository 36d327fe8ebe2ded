from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from edumanage import templates
from edumanage.autosave import AutoSaver
from edumanage.cli import course_line, enrollment_line, instructor_line, student_line
from edumanage.errors import EduManageError, ImportSourceError
from edumanage.exchange import default_export_name, export_to_file, read_import_source
from edumanage.model import LEVELS, Course, Instructor, Student, instructor_name
from edumanage.repair import audit
from edumanage.repository import Repository
from edumanage.search import filter_courses, filter_enrollments, filter_instructors, filter_students

# Optional rich
try:
    from rich.console import Console
    from rich.table import Table
    from rich import box
    from rich.markup import escape

    HAS_RICH = True
    console = Console()
except Exception:  # pragma: no cover
    HAS_RICH = False
    console = None


def _println(msg: str = "") -> None:
    if HAS_RICH:
        console.print(msg, markup=False)
    else:
        print(msg)


def _prompt(msg: str) -> str:
    if HAS_RICH:
        return console.input(msg, markup=False)
    return input(msg)


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x)


def _prompt_int(msg: str) -> Optional[int]:
    raw = _prompt(msg).strip()
    if not raw:
        return None
    if not raw.isdigit():
        _println("Not a number.")
        return None
    return int(raw)


def _prompt_choice(msg: str, choices: tuple[str, ...], default: str) -> str:
    raw = _prompt(f"{msg} {'/'.join(choices)} [{default}]: ").strip()
    for c in choices:
        if raw.lower() == c.lower():
            return c
    return default


def _split_csv(text: str) -> List[str]:
    return [s.strip() for s in text.split(",") if s.strip()]


def run_interactive(repo: Repository, autosaver_factory: Callable[[Repository], AutoSaver] = AutoSaver) -> None:
    """
    Interactive menu loop.

    An AutoSaver runs for the whole session (periodic + debounced saves); leaving
    the menu flushes it, i.e. performs a final forced save.
    """
    with autosaver_factory(repo) as autosaver:
        while True:
            _print_header(repo)

            choice = _prompt(
                "\n[1] Courses\n"
                "[2] Students\n"
                "[3] Instructors\n"
                "[4] Enrollments\n"
                "[5] Add course\n"
                "[6] Add student\n"
                "[7] Add instructor\n"
                "[8] Enroll student\n"
                "[9] Unenroll student\n"
                "[10] Delete course/student/instructor\n"
                "[11] AI recommendations\n"
                "[12] Toggle AI\n"
                "[13] Export / import data\n"
                "[14] Check data integrity\n"
                "[0] Exit\n"
                "Select: "
            ).strip()

            if choice == "0":
                _println("Bye.")
                return

            try:
                changed = _dispatch(choice, repo)
            except EduManageError as e:
                _println(f"Error: {e}")
                continue

            if changed:
                autosaver.touch()


def _dispatch(choice: str, repo: Repository) -> bool:
    """
    Run one menu entry. Returns True if the dataset was changed.
    """
    if choice == "1":
        _flow_list_courses(repo)
    elif choice == "2":
        _flow_list(repo, "Students", filter_students, lambda s: student_line(s))
    elif choice == "3":
        _flow_list(repo, "Instructors", filter_instructors, lambda i: instructor_line(i))
    elif choice == "4":
        _flow_list(repo, "Enrollments", filter_enrollments, lambda e: enrollment_line(e, repo.data))
    elif choice == "5":
        return _flow_add_course(repo)
    elif choice == "6":
        return _flow_add_student(repo)
    elif choice == "7":
        return _flow_add_instructor(repo)
    elif choice == "8":
        return _flow_enroll(repo)
    elif choice == "9":
        return _flow_unenroll(repo)
    elif choice == "10":
        return _flow_delete(repo)
    elif choice == "11":
        return _flow_recommend(repo)
    elif choice == "12":
        enabled = not repo.data["aiSettings"].get("enabled", True)
        repo.set_ai_enabled(enabled)
        _println("AI system activated" if enabled else "AI system deactivated")
        return True
    elif choice == "13":
        return _flow_exchange(repo)
    elif choice == "14":
        _flow_check(repo)
    else:
        _println("Invalid choice.")
    return False


def _print_header(repo: Repository) -> None:
    data = repo.data
    ai = "ON" if data["aiSettings"].get("enabled", True) else "OFF"
    _println("\n=== EduManage (interactive) ===")
    _println(
        f"Courses: {len(data['courses'])} | Students: {len(data['students'])} | "
        f"Instructors: {len(data['instructors'])} | Enrollments: {len(data['enrollments'])} | AI: {ai}"
    )
    if not repo.storage_available:
        _println("Storage not available: changes will not survive a restart.")
    elif repo.last_save_ok is False:
        _println("Last save failed: changes are kept in memory only.")


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


def _flow_list_courses(repo: Repository) -> None:
    data = repo.data
    query = _prompt("Search text [blank = all]: ").strip()
    courses = filter_courses(data, query)
    if not courses:
        _println("No results.")
        return

    if HAS_RICH:
        table = Table(title="Courses", box=box.SIMPLE)
        for col in ("ID", "Name", "Instructor", "Category", "Level", "Status", "Enrolled", "Price"):
            table.add_column(col)
        for c in courses:
            enrolled = f"{c.get('enrolled', 0)}/{c.get('capacity', '?')}"
            name = escape(_safe_str(c.get("name")))
            if c.get("aiGenerated"):
                name += " [magenta](AI)[/]"
            table.add_row(
                f"[bold cyan]{c.get('id')}[/]",
                name,
                escape(instructor_name(c, data["instructors"])),
                escape(_safe_str(c.get("category"))),
                escape(_safe_str(c.get("level"))),
                f"[green]{_safe_str(c.get('status'))}[/]",
                f"[yellow]{enrolled}[/]",
                f"${c.get('price', 0)}",
            )
        console.print(table)
        return

    for c in courses:
        _println(course_line(c, data))


def _flow_list(repo: Repository, title: str, filter_fn: Callable[..., List[Dict[str, Any]]], line_fn) -> None:
    query = _prompt("Search text [blank = all]: ").strip()
    rows = filter_fn(repo.data, query)
    if not rows:
        _println("No results.")
        return

    if HAS_RICH:
        table = Table(title=title, box=box.SIMPLE)
        table.add_column(title[:-1])
        for r in rows:
            table.add_row(escape(line_fn(r)))
        console.print(table)
        return

    _println(f"{title}:")
    for r in rows:
        _println(f"- {line_fn(r)}")


# ---------------------------------------------------------------------------
# Adding
# ---------------------------------------------------------------------------


def _flow_add_course(repo: Repository) -> bool:
    name = _prompt("Course name [blank = back]: ").strip()
    if not name:
        return False

    record = Course(name=name).to_dict()
    del record["id"], record["enrolled"]
    record["category"] = _prompt("Category (e.g. Programming, Data Science): ").strip()
    record["level"] = _prompt_choice("Level", LEVELS, "Beginner")
    record["capacity"] = _prompt_int("Capacity: ") or 1
    record["price"] = _prompt_int("Price: ") or 0
    record["startDate"] = _prompt("Start date (YYYY-MM-DD): ").strip()
    record["endDate"] = _prompt("End date (YYYY-MM-DD): ").strip()
    record["instructorId"] = _prompt_int("Instructor ID [blank = unassigned]: ")

    ai_on = repo.data["aiSettings"].get("enabled", True)
    if ai_on and record["category"] and _prompt("Generate description with AI? [Y/n]: ").strip().lower() != "n":
        record["description"] = templates.describe_course(record["category"], record["level"])
        record["aiGenerated"] = True
        _println(f"AI description ({templates.confidence_score()}% confidence):\n{record['description']}")
    else:
        record["description"] = _prompt("Description: ").strip()

    course = repo.add_course(record)
    _println(f"Added course {course['id']}: {course['name']}")
    return True


def _flow_add_student(repo: Repository) -> bool:
    name = _prompt("Student name [blank = back]: ").strip()
    if not name:
        return False

    record = Student(name=name).to_dict()
    del record["id"]
    record["email"] = _prompt("Email: ").strip()
    record["phone"] = _prompt("Phone: ").strip()
    record["address"] = _prompt("Address: ").strip()
    record["level"] = _prompt_choice("Level", LEVELS, "Beginner")
    record["interests"] = _split_csv(_prompt("Interests (comma-separated): "))

    student = repo.add_student(record)
    _println(f"Added student {student['id']}: {student['name']}")
    return True


def _flow_add_instructor(repo: Repository) -> bool:
    name = _prompt("Instructor name [blank = back]: ").strip()
    if not name:
        return False

    record = Instructor(name=name).to_dict()
    for key in ("id", "rating", "joinDate"):
        del record[key]
    record["email"] = _prompt("Email: ").strip()
    record["phone"] = _prompt("Phone: ").strip()
    record["department"] = _prompt("Department: ").strip()
    record["expertise"] = _split_csv(_prompt("Expertise (comma-separated): "))
    record["experience"] = _prompt_int("Years of experience: ") or 0

    ai_on = repo.data["aiSettings"].get("enabled", True)
    if ai_on and record["department"] and _prompt("Generate bio with AI? [Y/n]: ").strip().lower() != "n":
        record["bio"] = templates.instructor_bio(
            name, record["department"], record["experience"], ", ".join(record["expertise"])
        )
        _println(f"AI bio:\n{record['bio']}")
    else:
        record["bio"] = _prompt("Bio: ").strip()

    instructor = repo.add_instructor(record)
    _println(f"Added instructor {instructor['id']}: {instructor['name']}")
    return True


# ---------------------------------------------------------------------------
# Enrollments / deletes
# ---------------------------------------------------------------------------


def _flow_enroll(repo: Repository) -> bool:
    student_id = _prompt_int("Student ID [blank = back]: ")
    if student_id is None:
        return False

    if repo.data["aiSettings"].get("enabled", True):
        recs = templates.recommend_courses(repo.data, student_id)
        if recs:
            _println("AI recommendations:")
            for rec in recs:
                c = rec["course"]
                _println(f"  {c['id']} | {c.get('name')} | {rec['reason']} | {round(rec['confidence'] * 100)}%")

    course_id = _prompt_int("Course ID [blank = back]: ")
    if course_id is None:
        return False

    repo.enroll(student_id, course_id)
    _println("Student enrolled successfully.")
    return True


def _flow_unenroll(repo: Repository) -> bool:
    student_id = _prompt_int("Student ID [blank = back]: ")
    course_id = _prompt_int("Course ID [blank = back]: ") if student_id is not None else None
    if student_id is None or course_id is None:
        return False

    confirm = _prompt(f"Unenroll student {student_id} from course {course_id}? [y/N]: ").strip().lower()
    if confirm != "y":
        return False
    removed = repo.unenroll(student_id, course_id)
    _println("Student unenrolled." if removed else "No such enrollment.")
    return bool(removed)


def _flow_delete(repo: Repository) -> bool:
    kind = _prompt("Delete what? [c]ourse / [s]tudent / [i]nstructor [blank = back]: ").strip().lower()
    if kind not in ("c", "s", "i"):
        return False
    record_id = _prompt_int("ID: ")
    if record_id is None:
        return False

    if kind == "c":
        course = repo.get_course(record_id)
        label = f"course \"{course.get('name')}\" and all related enrollments" if course else f"course {record_id}"
    elif kind == "s":
        student = repo.get_student(record_id)
        label = f"student \"{student.get('name')}\" and all their enrollments" if student else f"student {record_id}"
    else:
        assigned = [c for c in repo.data["courses"] if c.get("instructorId") == record_id]
        label = f"instructor {record_id}"
        if assigned:
            label += f" (unassigns {len(assigned)} course(s))"

    if _prompt(f"Delete {label}? [y/N]: ").strip().lower() != "y":
        return False

    if kind == "c":
        repo.delete_course(record_id)
    elif kind == "s":
        repo.delete_student(record_id)
    else:
        repo.delete_instructor(record_id)
    _println("Deleted.")
    return True


def _flow_recommend(repo: Repository) -> bool:
    if not repo.data["aiSettings"].get("enabled", True):
        _println("AI system is disabled.")
        return False
    student_id = _prompt_int("Student ID: ")
    if student_id is None:
        return False
    recs = templates.recommend_courses(repo.data, student_id)
    if not recs:
        _println("No recommendations.")
        return False
    for rec in recs:
        c = rec["course"]
        _println(f"{c['id']} | {c.get('name')} | {rec['reason']} | {round(rec['confidence'] * 100)}%")

    pick = _prompt_int("Enroll in course ID [blank = no]: ")
    if pick is None:
        return False
    repo.enroll(student_id, pick, ai_suggested=True)
    _println("Enrolled via AI recommendation!")
    return True


# ---------------------------------------------------------------------------
# Export / import / check
# ---------------------------------------------------------------------------


def _flow_exchange(repo: Repository) -> bool:
    choice = _prompt("[e]xport or [i]mport? [blank = back]: ").strip().lower()

    if choice == "e":
        default_path = Path.home() / "Downloads" / default_export_name()
        out_in = _prompt(f"Output file [{default_path}]: ").strip()
        out_path = Path(out_in) if out_in else default_path
        if out_path.suffix.lower() != ".json":
            out_path = out_path.with_suffix(".json")
        try:
            out = export_to_file(repo, out_path)
        except OSError as e:
            _println(f"Error exporting data: {e}")
            return False
        _println(f"Exported to: {out.resolve()}")
        return False

    if choice == "i":
        source = _prompt("File path or URL: ").strip()
        try:
            text = read_import_source(source)
        except ImportSourceError as e:
            _println(str(e))
            return False
        if not repo.import_text(text):
            _println("Invalid data format.")
            return False
        _println("Data imported successfully.")
        return True

    return False


def _flow_check(repo: Repository) -> None:
    findings = audit(repo.data)
    if not findings:
        _println("No inconsistencies found.")
        return
    _println(f"Inconsistencies found: {len(findings)}")
    for f in findings:
        _println(f"- {f}")
