from enum import Enum


class TeacherStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"


class UserRole(str, Enum):
    ANONYMOUS = "anonymous"
    TEACHER = "teacher"
    STUDENT = "student"


class SessionStatus(str, Enum):
    """Per-student state of one session on the student dashboard."""

    COMPLETED = "completed"
    OPEN = "open"
    CLOSED = "closed"
