"""
Repository: owner of the live dataset.

The repository is the only component that holds the canonical collections.
Everything else (CLI, interactive menu, templates) reads `repository.data` or
asks the repository to mutate it.

Persistence uses two slots of the key-value store:

    primary  always written on save()
    backup   written when forced, when no backup exists yet, or when more
             than BACKUP_INTERVAL_SECONDS passed since the last backup write

Loading tries primary, then backup, then falls back to the seed dataset. Any
parse/shape failure is treated like a missing value; load() never raises and
save() only ever returns True/False.
"""

from __future__ import annotations

import copy
import json
import logging
import random
import threading
import time
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from edumanage.errors import EnrollmentError, NotFoundError
from edumanage.model import ACTIVE, Enrollment, empty_dataset, find_by_id, next_id
from edumanage.repair import (
    cascade_delete_course,
    cascade_delete_instructor,
    cascade_delete_student,
    looks_like_dataset,
    repair,
    split_expertise,
    update_enrollment_counts,
)
from edumanage.seed import initial_data
from edumanage.storage import KeyValueStore

logger = logging.getLogger(__name__)

PRIMARY_KEY = "edumanage_ai_data"
BACKUP_KEY = "edumanage_ai_backup"
BACKUP_INTERVAL_SECONDS = 300
EXPORT_VERSION = "2.0-ai"

# Exceptions repair() may hit on structurally odd but sniff-passing documents
_REPAIR_ERRORS = (TypeError, ValueError, AttributeError, KeyError, RecursionError)

# json.loads raises RecursionError on very deeply nested documents
_PARSE_ERRORS = (ValueError, RecursionError)

_LABELS = {"courses": "Course", "students": "Student", "instructors": "Instructor"}


def _today() -> str:
    return date.today().isoformat()


class Repository:
    """
    Owns the in-memory dataset and its persistence.

    `clock` and `rng` are injectable so tests can control backup throttling and
    the randomized defaults.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self._clock = clock
        self._rng = rng if rng is not None else random.Random()
        self._lock = threading.RLock()
        self._data: Dict[str, Any] = empty_dataset()
        self._last_backup_at: Optional[float] = None
        self.last_save_ok: Optional[bool] = None

        self.storage_available = store.probe()
        if not self.storage_available:
            logger.info("Storage not available: changes will not survive a restart")

    def __enter__(self) -> "Repository":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def _read_slot(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Read, parse, sniff and repair one slot. Any failure means "miss".
        """
        raw = self.store.read(key)
        if raw is None:
            return None
        try:
            parsed = json.loads(raw)
        except _PARSE_ERRORS as e:
            logger.warning("Discarding unreadable data in %s: %s", key, e)
            return None
        if not looks_like_dataset(parsed):
            logger.warning("Discarding data in %s: not a dataset", key)
            return None
        try:
            return repair(parsed, rng=self._rng)
        except _REPAIR_ERRORS as e:
            logger.warning("Discarding data in %s: repair failed: %s", key, e)
            return None

    def load(self) -> Dict[str, Any]:
        """
        Load the dataset: primary slot, else backup slot, else seed.

        The result is always repaired and has fresh enrollment counts. A seed
        dataset is persisted right away to both slots.
        """
        with self._lock:
            seeded = False
            if not self.storage_available:
                data = repair(initial_data(), rng=self._rng)
            else:
                data = self._read_slot(PRIMARY_KEY)
                if data is None:
                    logger.info("Primary data missing or unusable, trying backup")
                    data = self._read_slot(BACKUP_KEY)
                    if data is not None:
                        logger.info("Recovered data from backup")
                if data is None:
                    logger.info("No stored data found, loading seed dataset")
                    data = repair(initial_data(), rng=self._rng)
                    seeded = True

            update_enrollment_counts(data)
            self._data = data
            self._last_backup_at = self._clock()

            if seeded:
                self.save(force=True)
            return self._data

    def save(self, force: bool = False) -> bool:
        """
        Write the current snapshot to the primary slot, plus the backup slot
        when due. Returns whether the primary write succeeded.
        """
        if not self.storage_available:
            logger.debug("Storage not available, data not saved")
            self.last_save_ok = False
            return False

        with self._lock:
            try:
                serialized = json.dumps(self._data, ensure_ascii=False)
            except (TypeError, ValueError, RecursionError) as e:
                logger.error("Cannot serialize dataset: %s", e)
                self.last_save_ok = False
                return False

            now = self._clock()
            if not self.store.write(PRIMARY_KEY, serialized):
                logger.error("Saving data failed")
                self.last_save_ok = False
                return False

            backup_due = (
                force or self._last_backup_at is None or now - self._last_backup_at > BACKUP_INTERVAL_SECONDS
            )
            if backup_due:
                if self.store.write(BACKUP_KEY, serialized):
                    self._last_backup_at = now
                    logger.info("Backup created")
                else:
                    logger.error("Backup write failed")

            logger.debug("Data saved")
            self.last_save_ok = True
            return True

    def close(self) -> bool:
        """Final forced save at shutdown."""
        return self.save(force=True)

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def import_document(self, doc: Any) -> bool:
        """
        Replace the live dataset with an imported document.

        The document must carry courses, students and instructors; it is merged
        over empty defaults and repaired exactly like stored data.
        """
        if not looks_like_dataset(doc):
            logger.warning("Import rejected: invalid data format")
            return False

        merged = empty_dataset()
        merged.update(doc)
        try:
            data = repair(merged, rng=self._rng)
        except _REPAIR_ERRORS as e:
            logger.warning("Import rejected: %s", e)
            return False
        update_enrollment_counts(data)

        with self._lock:
            self._data = data
        self.save()
        return True

    def import_text(self, text: str) -> bool:
        try:
            doc = json.loads(text)
        except _PARSE_ERRORS as e:
            logger.warning("Import rejected: invalid JSON: %s", e)
            return False
        return self.import_document(doc)

    def export_document(self) -> Dict[str, Any]:
        """
        Return the live dataset plus export metadata. Forces a save (and backup)
        first, like any explicit export.
        """
        self.save(force=True)
        with self._lock:
            doc = copy.deepcopy(self._data)
        doc["exportDate"] = datetime.now(timezone.utc).isoformat(timespec="seconds")
        doc["version"] = EXPORT_VERSION
        return doc

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _require(self, collection: str, record_id: int) -> Dict[str, Any]:
        record = find_by_id(self._data[collection], record_id)
        if record is None:
            raise NotFoundError(f"{_LABELS[collection]} {record_id} not found")
        return record

    def get_course(self, course_id: int) -> Optional[Dict[str, Any]]:
        return find_by_id(self._data["courses"], course_id)

    def get_student(self, student_id: int) -> Optional[Dict[str, Any]]:
        return find_by_id(self._data["students"], student_id)

    def get_instructor(self, instructor_id: int) -> Optional[Dict[str, Any]]:
        return find_by_id(self._data["instructors"], instructor_id)

    def _changed(self) -> None:
        update_enrollment_counts(self._data)
        self.save()

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    def _course_record(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        course = dict(fields)
        # display name is derived from instructorId, never stored
        course.pop("instructor", None)
        course.setdefault("instructorId", None)
        if course.get("aiGenerated") is None:
            course["aiGenerated"] = False
        if course.get("popularity") is None:
            course["popularity"] = self._rng.randrange(60, 100)
        if not isinstance(course.get("tags"), list):
            course["tags"] = []
        return course

    def add_course(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            course = self._course_record(fields)
            instructor = None
            if course["instructorId"] is not None:
                instructor = self._require("instructors", course["instructorId"])

            course["id"] = next_id(self._data["courses"])
            course["enrolled"] = 0
            self._data["courses"].append(course)

            if instructor is not None and course["id"] not in instructor["courses"]:
                instructor["courses"].append(course["id"])

            self._changed()
            return course

    def update_course(self, course_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Replace a course record. id and the derived `enrolled` are kept; a changed
        instructorId moves the course between the instructors' course lists.
        """
        with self._lock:
            existing = self._require("courses", course_id)
            course = self._course_record(fields)
            new_iid = course["instructorId"]
            new_instructor = self._require("instructors", new_iid) if new_iid is not None else None

            course["id"] = course_id
            course["enrolled"] = existing.get("enrolled", 0)

            old_iid = existing.get("instructorId")
            if old_iid != new_iid:
                old_instructor = find_by_id(self._data["instructors"], old_iid) if old_iid is not None else None
                if old_instructor is not None:
                    old_instructor["courses"] = [c for c in old_instructor["courses"] if c != course_id]
                if new_instructor is not None and course_id not in new_instructor["courses"]:
                    new_instructor["courses"].append(course_id)

            courses = self._data["courses"]
            courses[courses.index(existing)] = course
            self._changed()
            return course

    def delete_course(self, course_id: int) -> Dict[str, Any]:
        """Delete a course with its enrollments; students and instructors drop the id."""
        with self._lock:
            course = self._require("courses", course_id)
            cascade_delete_course(self._data, course_id)
            self._changed()
            return course

    # ------------------------------------------------------------------
    # Students
    # ------------------------------------------------------------------

    def _student_record(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        student = dict(fields)
        if not student.get("level"):
            student["level"] = "Beginner"
        for key in ("interests", "aiRecommendations", "learningPath"):
            if not isinstance(student.get(key), list):
                student[key] = []
        return student

    def add_student(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            student = self._student_record(fields)
            student["id"] = next_id(self._data["students"])
            student["courses"] = []
            student["enrollmentDate"] = student.get("enrollmentDate") or _today()
            self._data["students"].append(student)
            self._changed()
            return student

    def update_student(self, student_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            existing = self._require("students", student_id)
            student = self._student_record(fields)
            student["id"] = student_id
            student["courses"] = existing.get("courses", [])
            student["enrollmentDate"] = existing.get("enrollmentDate", "")

            students = self._data["students"]
            students[students.index(existing)] = student
            self._changed()
            return student

    def delete_student(self, student_id: int) -> Dict[str, Any]:
        with self._lock:
            student = self._require("students", student_id)
            cascade_delete_student(self._data, student_id)
            self._changed()
            return student

    # ------------------------------------------------------------------
    # Instructors
    # ------------------------------------------------------------------

    def _instructor_record(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        instructor = dict(fields)
        instructor["expertise"] = split_expertise(instructor.get("expertise"))
        if instructor.get("aiOptimized") is None:
            instructor["aiOptimized"] = False
        if not isinstance(instructor.get("availability"), list):
            instructor["availability"] = []
        return instructor

    def add_instructor(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            instructor = self._instructor_record(fields)
            instructor["id"] = next_id(self._data["instructors"])
            instructor["courses"] = []
            instructor["joinDate"] = instructor.get("joinDate") or _today()
            if instructor.get("rating") is None:
                instructor["rating"] = round(self._rng.uniform(4.0, 5.0), 1)
            self._data["instructors"].append(instructor)
            self._changed()
            return instructor

    def update_instructor(self, instructor_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            existing = self._require("instructors", instructor_id)
            instructor = self._instructor_record(fields)
            instructor["id"] = instructor_id
            instructor["courses"] = existing.get("courses", [])
            instructor["joinDate"] = existing.get("joinDate", "")
            instructor["rating"] = existing.get("rating")

            instructors = self._data["instructors"]
            instructors[instructors.index(existing)] = instructor
            self._changed()
            return instructor

    def delete_instructor(self, instructor_id: int) -> List[Dict[str, Any]]:
        """
        Delete an instructor. Their courses are kept and become unassigned.
        Returns the courses that were unassigned.
        """
        with self._lock:
            self._require("instructors", instructor_id)
            assigned = [c for c in self._data["courses"] if c.get("instructorId") == instructor_id]
            cascade_delete_instructor(self._data, instructor_id)
            self._changed()
            return assigned

    # ------------------------------------------------------------------
    # Enrollments
    # ------------------------------------------------------------------

    def _active_enrollment(self, student_id: int, course_id: int) -> Optional[Dict[str, Any]]:
        for e in self._data["enrollments"]:
            if e.get("studentId") == student_id and e.get("courseId") == course_id and e.get("status") == ACTIVE:
                return e
        return None

    def enroll(self, student_id: int, course_id: int, ai_suggested: bool = False) -> Dict[str, Any]:
        """
        Enroll a student. Capacity is checked here, at enrollment time only.
        """
        with self._lock:
            student = self._require("students", student_id)
            course = self._require("courses", course_id)

            if self._active_enrollment(student_id, course_id) is not None:
                raise EnrollmentError("Student is already enrolled in this course")

            capacity = course.get("capacity")
            if isinstance(capacity, int) and course.get("enrolled", 0) >= capacity:
                raise EnrollmentError("Course is at full capacity")

            enrollment = Enrollment(
                student_id=student_id,
                course_id=course_id,
                enrollment_date=_today(),
                ai_suggested=ai_suggested,
            ).to_dict()
            self._data["enrollments"].append(enrollment)
            if course_id not in student["courses"]:
                student["courses"].append(course_id)

            self._changed()
            return enrollment

    def unenroll(self, student_id: int, course_id: int) -> int:
        """
        Remove every enrollment row of the pair. Returns the number removed.
        """
        with self._lock:
            before = len(self._data["enrollments"])
            self._data["enrollments"] = [
                e
                for e in self._data["enrollments"]
                if not (e.get("studentId") == student_id and e.get("courseId") == course_id)
            ]
            removed = before - len(self._data["enrollments"])

            student = find_by_id(self._data["students"], student_id)
            if student is not None:
                student["courses"] = [c for c in student.get("courses", []) if c != course_id]

            self._changed()
            return removed

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_ai_enabled(self, enabled: bool) -> None:
        with self._lock:
            self._data["aiSettings"]["enabled"] = bool(enabled)
            self.save()
