"""
Central data model definitions used across the project.

The live dataset is a plain JSON-compatible dict so that the exact same structure
is held in memory, written to the store and exported:

    {
        "courses": [...],
        "students": [...],
        "instructors": [...],
        "categories": [...],
        "enrollments": [...],
        "aiSettings": {...},
    }

The dataclasses below document the record shapes (camelCase keys in the stored
form) and are used when new records are built from user input.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


COLLECTIONS = ("courses", "students", "instructors", "categories", "enrollments")

COURSE_STATUSES = ("Active", "Upcoming", "Completed", "Cancelled")
LEVELS = ("Beginner", "Intermediate", "Advanced")
PERSON_STATUSES = ("Active", "Inactive")
ENROLLMENT_STATUSES = ("Active", "Completed", "Dropped")
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

ACTIVE = "Active"
UNASSIGNED = "Unassigned"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


def _to_camel_dict(obj: Any) -> Dict[str, Any]:
    return {_camel(k): v for k, v in asdict(obj).items()}


@dataclass
class Course:
    """
    One course of the catalog.

    `enrolled` is derived (count of Active enrollments) and recomputed in full
    after structural changes; the instructor's display name is never stored,
    see instructor_name().
    """

    name: str
    id: Optional[int] = None
    description: str = ""
    instructor_id: Optional[int] = None
    category: str = ""
    level: str = "Beginner"
    status: str = "Active"
    capacity: int = 1
    enrolled: int = 0
    price: float = 0
    start_date: str = ""
    end_date: str = ""
    duration: str = ""
    ai_generated: bool = False
    popularity: int = 60
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return _to_camel_dict(self)


@dataclass
class Student:
    name: str
    id: Optional[int] = None
    email: str = ""
    phone: str = ""
    address: str = ""
    status: str = "Active"
    level: str = "Beginner"
    enrollment_date: str = ""
    interests: List[str] = field(default_factory=list)
    courses: List[int] = field(default_factory=list)
    ai_recommendations: List[int] = field(default_factory=list)
    learning_path: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return _to_camel_dict(self)


@dataclass
class Instructor:
    name: str
    id: Optional[int] = None
    email: str = ""
    phone: str = ""
    department: str = ""
    expertise: List[str] = field(default_factory=list)
    experience: int = 0
    bio: str = ""
    courses: List[int] = field(default_factory=list)
    status: str = "Active"
    join_date: str = ""
    rating: float = 4.5
    ai_optimized: bool = False
    availability: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return _to_camel_dict(self)


@dataclass
class Enrollment:
    """
    Enrollments have no id of their own: a row is identified by
    (student_id, course_id) plus its status. Older non-Active rows for the same
    pair may coexist with one Active row.
    """

    student_id: int
    course_id: int
    enrollment_date: str = ""
    status: str = ACTIVE
    progress: int = 0
    ai_suggested: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return _to_camel_dict(self)


@dataclass
class AISettings:
    enabled: bool = True
    auto_recommendations: bool = True
    auto_descriptions: bool = True
    smart_suggestions: bool = True
    predictive_analytics: bool = True
    confidence_threshold: float = 0.7

    def to_dict(self) -> Dict[str, Any]:
        return _to_camel_dict(self)


def default_ai_settings() -> Dict[str, Any]:
    return AISettings().to_dict()


def empty_dataset() -> Dict[str, Any]:
    """
    Return a dataset with empty collections and default settings.
    Imported documents are merged over this.
    """
    data: Dict[str, Any] = {name: [] for name in COLLECTIONS}
    data["aiSettings"] = default_ai_settings()
    return data


def find_by_id(records: List[Dict[str, Any]], record_id: Any) -> Optional[Dict[str, Any]]:
    for r in records:
        if r.get("id") == record_id:
            return r
    return None


def next_id(records: List[Dict[str, Any]]) -> int:
    """
    Next free integer id: max existing id + 1, or 1 for an empty collection.

    Not safe against concurrent writers; the store has exactly one.
    """
    ids = [r.get("id") for r in records if isinstance(r.get("id"), int)]
    return max(ids) + 1 if ids else 1


def instructor_name(course: Dict[str, Any], instructors: List[Dict[str, Any]]) -> str:
    """
    Display name of the course's instructor, derived from instructorId on read.
    """
    instructor_id = course.get("instructorId")
    if instructor_id is None:
        return UNASSIGNED
    instructor = find_by_id(instructors, instructor_id)
    if instructor is None:
        return UNASSIGNED
    return str(instructor.get("name") or UNASSIGNED)
