from typing import List, Optional

from fastapi import HTTPException, status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    code = "SERVICE_ERROR"

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AppWideError(ServiceError):
    """Halts the whole application into a dedicated error screen."""

    code = "APP_ERROR"


class ConfigMissing(AppWideError):
    """Store credentials are not configured. Blocks the whole application."""

    code = "CONFIG_MISSING"

    def __init__(self, missing: List[str]) -> None:
        super().__init__(
            "Store connection settings are missing: " + ", ".join(missing),
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )
        self.missing = missing


NETWORK_REMEDIATION = [
    "Try again over mobile data (LTE/5G) instead of the school network.",
    "Temporarily disable ad blockers or privacy extensions.",
    "On Brave, turn off Shields for this site.",
]


class AuthNetworkBlocked(AppWideError):
    """The identity/store backend could not be reached during authentication."""

    code = "AUTH_NETWORK_BLOCKED"

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(
            "The network connection to the database was blocked. "
            "A school or office firewall or a browser ad blocker may be the cause.",
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )
        self.detail = detail
        self.remediation = NETWORK_REMEDIATION


class AuthFailed(ServiceError):
    code = "AUTH_FAILED"

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class LookupNotFound(ServiceError):
    code = "LOOKUP_NOT_FOUND"

    def __init__(self, message: str = "Not found", status_code: int = status.HTTP_404_NOT_FOUND) -> None:
        super().__init__(message, status_code)


class UploadRejected(ServiceError):
    code = "UPLOAD_REJECTED"

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> None:
        super().__init__(message, status_code)


class SubmissionClosed(ServiceError):
    code = "SUBMISSION_CLOSED"

    def __init__(self) -> None:
        super().__init__("Submission is not open for this class", status.HTTP_403_FORBIDDEN)


class AlreadySubmitted(ServiceError):
    code = "ALREADY_SUBMITTED"

    def __init__(self) -> None:
        super().__init__("This test has already been submitted", status.HTTP_409_CONFLICT)


class TeacherCodeConflict(ServiceError):
    code = "TEACHER_CODE_CONFLICT"

    def __init__(self, teacher_code: str) -> None:
        super().__init__(f"Teacher code {teacher_code} belongs to another teacher", status.HTTP_409_CONFLICT)
        self.teacher_code = teacher_code


def to_http_exception(e: ServiceError) -> Exception:
    """Per-action errors become HTTP errors; app-wide ones go to the global handlers."""
    if isinstance(e, AppWideError):
        return e
    return HTTPException(status_code=e.status_code, detail=e.message)
