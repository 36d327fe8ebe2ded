"""
Integrity validation and repair of the dataset.

Every dataset passes through repair() before it becomes live, whether it was
read from the primary slot, the backup slot, an imported document or the seed
fixture. The steps run in a fixed order:

1. coerce the collections to lists (dropping entries that are not records)
2. default the aiSettings singleton
3. courses: placeholder ids, aiGenerated, popularity, tags, instructorId
4. students: placeholder ids, courses, level and the advisory lists
5. instructors: placeholder ids, courses, expertise, aiOptimized,
   availability, rating
6. enrollments: drop rows whose student or course does not exist,
   default aiSuggested and progress on the survivors

Ids must be well-formed (steps 3-5) before the referential filter (step 6) can
trust them. Repair never deletes students, courses or instructors.

repair() is idempotent: repairing a repaired dataset returns an equal dataset.
"""

from __future__ import annotations

import copy
import logging
import random
from typing import Any, Dict, List, Optional

from edumanage.model import ACTIVE, COLLECTIONS, UNASSIGNED, default_ai_settings, find_by_id

logger = logging.getLogger(__name__)


def looks_like_dataset(obj: Any) -> bool:
    """
    Structural sniff: accept anything that carries the three main collections
    as lists. This is not schema validation; repair() does the rest.
    """
    if not isinstance(obj, dict):
        return False
    return all(isinstance(obj.get(name), list) for name in ("courses", "students", "instructors"))


def _valid_id(value: Any) -> bool:
    # bool is an int subclass, but True is not an id
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _coerce_id(value: Any) -> Any:
    """Accept numeric strings ("3") from hand-edited documents."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def _effective_id(record: Dict[str, Any], position: int) -> int:
    value = _coerce_id(record.get("id"))
    return value if _valid_id(value) else position


def _backfill_id(record: Dict[str, Any], position: int) -> None:
    record["id"] = _effective_id(record, position)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def split_expertise(value: Any) -> List[str]:
    """
    Normalize instructor expertise.
    Older records stored it as one comma-joined string: "Python, ML, Stats".
    """
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [s.strip() for s in value.split(",") if s.strip()]
    return []


def _repair_settings(data: Dict[str, Any]) -> None:
    settings = data.get("aiSettings")
    defaults = default_ai_settings()
    if not isinstance(settings, dict):
        data["aiSettings"] = defaults
        return
    for key, value in defaults.items():
        settings.setdefault(key, value)


def _repair_courses(data: Dict[str, Any], rng: random.Random) -> None:
    # Instructor ids are not backfilled yet (step 5); resolve them the same way.
    instructor_ids = {}
    for position, instructor in enumerate(data["instructors"], start=1):
        if isinstance(instructor.get("name"), str):
            instructor_ids.setdefault(instructor["name"], _effective_id(instructor, position))

    for position, course in enumerate(data["courses"], start=1):
        _backfill_id(course, position)
        if course.get("aiGenerated") is None:
            course["aiGenerated"] = False
        if course.get("popularity") is None:
            course["popularity"] = rng.randrange(60, 100)
        if not isinstance(course.get("tags"), list):
            course["tags"] = []

        # Legacy documents carry the denormalized display name "instructor".
        # It may still identify the instructor when the id is missing.
        legacy_name = course.pop("instructor", None)
        instructor_id = _coerce_id(course.get("instructorId"))
        if not _valid_id(instructor_id):
            instructor_id = None
            if isinstance(legacy_name, str) and legacy_name != UNASSIGNED:
                instructor_id = instructor_ids.get(legacy_name)
        course["instructorId"] = instructor_id


def _repair_students(data: Dict[str, Any]) -> None:
    for position, student in enumerate(data["students"], start=1):
        _backfill_id(student, position)
        student["courses"] = _as_list(student.get("courses"))
        if not student.get("level"):
            student["level"] = "Beginner"
        for key in ("interests", "aiRecommendations", "learningPath"):
            student[key] = _as_list(student.get(key))


def _repair_instructors(data: Dict[str, Any], rng: random.Random) -> None:
    for position, instructor in enumerate(data["instructors"], start=1):
        _backfill_id(instructor, position)
        instructor["courses"] = _as_list(instructor.get("courses"))
        instructor["expertise"] = split_expertise(instructor.get("expertise"))
        if instructor.get("aiOptimized") is None:
            instructor["aiOptimized"] = False
        instructor["availability"] = _as_list(instructor.get("availability"))
        if instructor.get("rating") is None:
            instructor["rating"] = round(rng.uniform(4.0, 5.0), 1)


def _repair_enrollments(data: Dict[str, Any], rng: random.Random) -> None:
    student_ids = {s["id"] for s in data["students"]}
    course_ids = {c["id"] for c in data["courses"]}

    kept: List[Dict[str, Any]] = []
    dropped = 0
    for enrollment in data["enrollments"]:
        enrollment["studentId"] = _coerce_id(enrollment.get("studentId"))
        enrollment["courseId"] = _coerce_id(enrollment.get("courseId"))
        sid, cid = enrollment["studentId"], enrollment["courseId"]
        if not (_valid_id(sid) and sid in student_ids and _valid_id(cid) and cid in course_ids):
            dropped += 1
            continue
        if enrollment.get("aiSuggested") is None:
            enrollment["aiSuggested"] = rng.random() > 0.7
        if enrollment.get("progress") is None:
            enrollment["progress"] = rng.randrange(100)
        kept.append(enrollment)

    if dropped:
        logger.info("Dropped %d dangling enrollment(s)", dropped)
    data["enrollments"] = kept


def repair(raw: Dict[str, Any], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """
    Return a repaired copy of `raw`. The input is left untouched.

    Missing numeric/boolean fields are filled from `rng`; pass a seeded
    random.Random for reproducible results.
    """
    if rng is None:
        rng = random.Random()

    source = raw if isinstance(raw, dict) else {}
    data: Dict[str, Any] = {}

    for name in COLLECTIONS:
        items = source.get(name)
        if not isinstance(items, list):
            data[name] = []
            continue
        records = [copy.deepcopy(x) for x in items if isinstance(x, dict)]
        if len(records) != len(items):
            logger.info("Dropped %d malformed %s entries", len(items) - len(records), name)
        data[name] = records

    data["aiSettings"] = copy.deepcopy(source.get("aiSettings"))
    _repair_settings(data)

    _repair_courses(data, rng)
    _repair_students(data)
    _repair_instructors(data, rng)
    _repair_enrollments(data, rng)

    return data


def update_enrollment_counts(data: Dict[str, Any]) -> None:
    """
    Recompute every course's `enrolled` from the Active enrollments (full pass).
    """
    counts: Dict[Any, int] = {}
    for e in data.get("enrollments", []):
        if e.get("status") == ACTIVE:
            counts[e.get("courseId")] = counts.get(e.get("courseId"), 0) + 1
    for course in data.get("courses", []):
        course["enrolled"] = counts.get(course.get("id"), 0)


def audit(data: Dict[str, Any]) -> List[str]:
    """
    Report soft-invariant drift that repair() deliberately leaves alone.

    Returns human-readable findings; an empty list means the dataset is
    consistent.
    """
    findings: List[str] = []

    active_pairs = {(e.get("studentId"), e.get("courseId")) for e in data["enrollments"] if e.get("status") == ACTIVE}
    course_ids = {c["id"] for c in data["courses"]}

    for student in data["students"]:
        sid = student["id"]
        held = set(student.get("courses", []))
        for cid in sorted(held, key=str):
            if (sid, cid) not in active_pairs:
                findings.append(f"Student {sid} lists course {cid} without an active enrollment")
        for s, cid in sorted(active_pairs, key=str):
            if s == sid and cid not in held:
                findings.append(f"Student {sid} is actively enrolled in course {cid} but does not list it")

    active_per_course: Dict[Any, int] = {}
    for _, cid in active_pairs:
        active_per_course[cid] = active_per_course.get(cid, 0) + 1
    for course in data["courses"]:
        capacity = course.get("capacity")
        n = active_per_course.get(course["id"], 0)
        if isinstance(capacity, int) and n > capacity:
            findings.append(f"Course {course['id']} has {n} active enrollments for capacity {capacity}")
        iid = course.get("instructorId")
        if iid is not None and find_by_id(data["instructors"], iid) is None:
            findings.append(f"Course {course['id']} references unknown instructor {iid}")

    for instructor in data["instructors"]:
        for cid in instructor.get("courses", []):
            if cid not in course_ids:
                findings.append(f"Instructor {instructor['id']} lists unknown course {cid}")

    return findings


# ---------------------------------------------------------------------------
# Cascading deletes (explicit delete operations only, never run by repair)
# ---------------------------------------------------------------------------


def cascade_delete_course(data: Dict[str, Any], course_id: int) -> None:
    data["courses"] = [c for c in data["courses"] if c.get("id") != course_id]
    data["enrollments"] = [e for e in data["enrollments"] if e.get("courseId") != course_id]
    for student in data["students"]:
        student["courses"] = [cid for cid in student.get("courses", []) if cid != course_id]
    for instructor in data["instructors"]:
        instructor["courses"] = [cid for cid in instructor.get("courses", []) if cid != course_id]


def cascade_delete_student(data: Dict[str, Any], student_id: int) -> None:
    data["students"] = [s for s in data["students"] if s.get("id") != student_id]
    data["enrollments"] = [e for e in data["enrollments"] if e.get("studentId") != student_id]


def cascade_delete_instructor(data: Dict[str, Any], instructor_id: int) -> None:
    # Courses stay; they become unassigned.
    data["instructors"] = [i for i in data["instructors"] if i.get("id") != instructor_id]
    for course in data["courses"]:
        if course.get("instructorId") == instructor_id:
            course["instructorId"] = None
