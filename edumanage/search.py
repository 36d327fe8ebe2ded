"""
Search / filter helpers for the list views.

Matching rule (same for every view): case-insensitive substring match of the
search text against a few text fields; an empty text matches everything.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from edumanage.model import find_by_id, instructor_name


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x)


def _matches(query: str, *fields: Any) -> bool:
    if not query:
        return True
    hay = " ".join(_safe_str(f) for f in fields).lower()
    return query in hay


def filter_courses(
    data: Dict[str, Any], text: str = "", category: Optional[str] = None, status: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Search in course name, instructor name and description.
    """
    query = (text or "").strip().lower()
    out: List[Dict[str, Any]] = []
    for c in data["courses"]:
        if category and c.get("category") != category:
            continue
        if status and c.get("status") != status:
            continue
        if _matches(query, c.get("name"), instructor_name(c, data["instructors"]), c.get("description")):
            out.append(c)
    return out


def filter_students(data: Dict[str, Any], text: str = "", status: Optional[str] = None) -> List[Dict[str, Any]]:
    query = (text or "").strip().lower()
    return [
        s
        for s in data["students"]
        if (not status or s.get("status") == status) and _matches(query, s.get("name"), s.get("email"), s.get("phone"))
    ]


def filter_instructors(
    data: Dict[str, Any], text: str = "", department: Optional[str] = None
) -> List[Dict[str, Any]]:
    query = (text or "").strip().lower()
    out: List[Dict[str, Any]] = []
    for i in data["instructors"]:
        if department and i.get("department") != department:
            continue
        expertise = i.get("expertise") or []
        if _matches(query, i.get("name"), i.get("email"), i.get("department"), *expertise):
            out.append(i)
    return out


def filter_enrollments(
    data: Dict[str, Any], text: str = "", course_id: Optional[int] = None, status: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Search enrollments by student or course name.
    """
    query = (text or "").strip().lower()
    out: List[Dict[str, Any]] = []
    for e in data["enrollments"]:
        if course_id is not None and e.get("courseId") != course_id:
            continue
        if status and e.get("status") != status:
            continue
        student = find_by_id(data["students"], e.get("studentId")) or {}
        course = find_by_id(data["courses"], e.get("courseId")) or {}
        if _matches(query, student.get("name"), course.get("name")):
            out.append(e)
    return out
