from typing import Optional

from classtest.auth.identity import Identity, IdentityService, network_guard
from classtest.auth.schemas import (
    AuthResponse,
    CurrentUser,
    CustomTokenRequest,
    StudentLoginRequest,
    TeacherCredentials,
    ViewResponse,
)
from classtest.auth.security import create_access_token
from classtest.core import view_state
from classtest.core.enums import TeacherStatus, UserRole
from classtest.core.tenant_service import TeacherSession, login_student, start_teacher_session
from classtest.store.base import DocumentStore


def _view(state: view_state.ViewState) -> ViewResponse:
    return ViewResponse(**view_state.describe(state))


def _issue(
    identity: Identity,
    role: UserRole,
    state: view_state.ViewState,
    tenant_id: Optional[str] = None,
    teacher_code: Optional[str] = None,
    student_id: Optional[str] = None,
) -> AuthResponse:
    access_payload = {
        "sub": identity.uid,
        "role": role.value,
        "email": identity.email,
        "tenant_id": tenant_id,
        "teacher_code": teacher_code,
        "student_id": student_id,
    }
    return AuthResponse(
        access_token=create_access_token(subject=access_payload),
        uid=identity.uid,
        role=role,
        tenant_id=tenant_id,
        teacher_code=teacher_code,
        student_id=student_id,
        view=_view(state),
    )


def _teacher_response(identity: Identity, session: TeacherSession) -> AuthResponse:
    if session.status == TeacherStatus.APPROVED:
        state = view_state.teacher_approved(
            view_state.LoginState(), session.tenant_id, session.teacher_code, session.email
        )
        return _issue(
            identity,
            UserRole.TEACHER,
            state,
            tenant_id=session.tenant_id,
            teacher_code=session.teacher_code,
        )
    state = view_state.teacher_pending(view_state.LoginState(), session.email)
    return _issue(identity, UserRole.TEACHER, state)


async def anonymous_sign_in(store: DocumentStore) -> AuthResponse:
    identity = await IdentityService(store).sign_in_anonymously()
    return _issue(identity, UserRole.ANONYMOUS, view_state.LoginState())


async def token_sign_in(store: DocumentStore, payload: CustomTokenRequest) -> AuthResponse:
    identity = await IdentityService(store).sign_in_with_token(payload.token)
    async with network_guard():
        session = await start_teacher_session(store, identity)
    return _teacher_response(identity, session)


async def teacher_signup(store: DocumentStore, payload: TeacherCredentials) -> AuthResponse:
    identity = await IdentityService(store).sign_up_with_password(payload.email, payload.password)
    async with network_guard():
        session = await start_teacher_session(store, identity)
    return _teacher_response(identity, session)


async def teacher_login(store: DocumentStore, payload: TeacherCredentials) -> AuthResponse:
    identity = await IdentityService(store).sign_in_with_password(payload.email, payload.password)
    async with network_guard():
        session = await start_teacher_session(store, identity)
    return _teacher_response(identity, session)


async def student_login(store: DocumentStore, payload: StudentLoginRequest) -> AuthResponse:
    async with network_guard():
        tenant_id, student = await login_student(store, payload.teacher_code, payload.student_code)
    identity = Identity(uid=f"student:{tenant_id}:{student.id}")
    state = view_state.student_logged_in(view_state.LoginState(), tenant_id, student.id)
    return _issue(
        identity,
        UserRole.STUDENT,
        state,
        tenant_id=tenant_id,
        teacher_code=payload.teacher_code.strip().upper(),
        student_id=student.id,
    )


def _state_for(user: CurrentUser) -> view_state.ViewState:
    if user.role == UserRole.TEACHER and user.tenant_id:
        state = view_state.AdminState(tenant_id=user.tenant_id, teacher_code=user.teacher_code or "", email=user.email)
    elif user.role == UserRole.TEACHER:
        state = view_state.TeacherPendingState(email=user.email)
    elif user.role == UserRole.STUDENT and user.tenant_id and user.student_id:
        state = view_state.StudentState(tenant_id=user.tenant_id, student_id=user.student_id)
    else:
        state = view_state.LoginState()
    return state


def current_view(user: CurrentUser) -> ViewResponse:
    """Screen for an already-issued token."""
    return _view(_state_for(user))


def logout_view(user: Optional[CurrentUser]) -> ViewResponse:
    state = _state_for(user) if user is not None else view_state.LoginState()
    return _view(view_state.logout(state))
