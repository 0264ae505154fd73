"""
Which screen a client should show, as an explicit state machine.

Each state carries its own typed payload; states change only through the named
transitions below. Transitions that make no sense from the current state raise
``InvalidTransition``.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from fastapi import status

from classtest.core.enums import TeacherStatus
from classtest.core.exceptions import ServiceError


class View(str, Enum):
    LOGIN = "login"
    TEACHER_PENDING = "teacherPending"
    ADMIN = "admin"
    STUDENT = "student"
    TEST = "test"
    CONFIG_ERROR = "configError"
    AUTH_ERROR = "authError"


class InvalidTransition(ServiceError):
    code = "INVALID_TRANSITION"

    def __init__(self, action: str, view: View) -> None:
        super().__init__(f"Cannot {action} from the {view.value} view", status.HTTP_409_CONFLICT)


@dataclass(frozen=True)
class LoginState:
    view = View.LOGIN


@dataclass(frozen=True)
class TeacherPendingState:
    email: str
    status: TeacherStatus = TeacherStatus.PENDING
    view = View.TEACHER_PENDING


@dataclass(frozen=True)
class AdminState:
    tenant_id: str
    teacher_code: str
    email: str
    view = View.ADMIN


@dataclass(frozen=True)
class StudentState:
    tenant_id: str
    student_id: str
    view = View.STUDENT


@dataclass(frozen=True)
class InTestState:
    tenant_id: str
    student_id: str
    session_id: str
    # Set once the submission is graded; the result dialog shows it
    result: Optional[int] = None
    view = View.TEST


@dataclass(frozen=True)
class ErrorState:
    view: View
    message: str
    remediation: Optional[List[str]] = None


ViewState = Union[LoginState, TeacherPendingState, AdminState, StudentState, InTestState, ErrorState]


def teacher_pending(state: ViewState, email: str) -> TeacherPendingState:
    if not isinstance(state, (LoginState, TeacherPendingState)):
        raise InvalidTransition("wait for approval", state.view)
    return TeacherPendingState(email=email)


def teacher_approved(state: ViewState, tenant_id: str, teacher_code: str, email: str) -> AdminState:
    if not isinstance(state, (LoginState, TeacherPendingState, AdminState)):
        raise InvalidTransition("open the admin dashboard", state.view)
    return AdminState(tenant_id=tenant_id, teacher_code=teacher_code, email=email)


def student_logged_in(state: ViewState, tenant_id: str, student_id: str) -> StudentState:
    if not isinstance(state, LoginState):
        raise InvalidTransition("log in as a student", state.view)
    return StudentState(tenant_id=tenant_id, student_id=student_id)


def start_test(state: ViewState, session_id: str) -> InTestState:
    if not isinstance(state, StudentState):
        raise InvalidTransition("start a test", state.view)
    return InTestState(tenant_id=state.tenant_id, student_id=state.student_id, session_id=session_id)


def finish_test(state: ViewState, score: int) -> InTestState:
    if not isinstance(state, InTestState) or state.result is not None:
        raise InvalidTransition("submit", state.view)
    return InTestState(
        tenant_id=state.tenant_id,
        student_id=state.student_id,
        session_id=state.session_id,
        result=score,
    )


def close_result(state: ViewState) -> StudentState:
    if not isinstance(state, InTestState):
        raise InvalidTransition("close the result", state.view)
    return StudentState(tenant_id=state.tenant_id, student_id=state.student_id)


def logout(state: ViewState) -> LoginState:
    return LoginState()


def fail(kind: View, message: str, remediation: Optional[List[str]] = None) -> ErrorState:
    if kind not in (View.CONFIG_ERROR, View.AUTH_ERROR):
        raise ValueError(f"{kind.value} is not an error view")
    return ErrorState(view=kind, message=message, remediation=remediation)


def describe(state: ViewState) -> Dict[str, Any]:
    """JSON-ready ``{"view": ..., "payload": {...}}``."""
    payload = {k: (v.value if isinstance(v, Enum) else v) for k, v in asdict(state).items() if k != "view"}
    return {"view": state.view.value, "payload": payload}
