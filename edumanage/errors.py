"""
Exceptions raised by explicit user operations.

Storage and parse failures never show up here: the repository turns them into
fallbacks (load) or a False return value (save).
"""


class EduManageError(Exception):
    """Base class for errors the CLI reports to the user."""


class NotFoundError(EduManageError):
    """A student, course or instructor id does not exist."""


class EnrollmentError(EduManageError):
    """An enrollment was rejected (already enrolled, course full)."""


class ImportSourceError(EduManageError):
    """An import file or URL could not be read."""
