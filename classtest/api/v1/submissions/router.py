"""Student-facing test routes: dashboard, start, submit and own review."""

from fastapi import APIRouter, Depends

from classtest.auth.rbac import require_student
from classtest.auth.schemas import CurrentUser
from classtest.core.exceptions import ServiceError, to_http_exception
from classtest.db.session import get_store
from classtest.store.base import DocumentStore

from . import service
from .schemas import (
    AnswerReviewResponse,
    DashboardResponse,
    StartTestResponse,
    SubmitRequest,
    SubmitResponse,
)

router = APIRouter(prefix="/api/v1", tags=["submissions"])


@router.get("/me/dashboard", response_model=DashboardResponse)
async def my_dashboard(
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_student),
):
    try:
        return await service.student_dashboard(store, current_user.tenant_id, current_user.student_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/submissions/{session_id}/start", response_model=StartTestResponse)
async def start_test(
    session_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_student),
):
    """Open the test screen. 403 while the class switch is off, 409 once submitted."""
    try:
        return await service.start_test(store, current_user.tenant_id, current_user.student_id, session_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/submissions/{session_id}", response_model=SubmitResponse)
async def submit_test(
    session_id: str,
    payload: SubmitRequest,
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_student),
):
    try:
        return await service.submit_test(
            store,
            current_user.tenant_id,
            current_user.student_id,
            session_id,
            payload.answers,
        )
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/submissions/{session_id}/review", response_model=AnswerReviewResponse)
async def review_my_submission(
    session_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_student),
):
    try:
        return await service.review_submission(store, current_user.tenant_id, current_user.student_id, session_id)
    except ServiceError as e:
        raise to_http_exception(e)
