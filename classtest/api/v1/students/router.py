"""Roster routes for approved teachers."""

from typing import List

from fastapi import APIRouter, Depends, status

from classtest.api.v1.submissions import service as submission_service
from classtest.api.v1.submissions.schemas import AnswerReviewResponse
from classtest.auth.rbac import require_teacher
from classtest.auth.schemas import CurrentUser
from classtest.core.exceptions import ServiceError, to_http_exception
from classtest.db.session import get_store
from classtest.store.base import DocumentStore

from . import service
from .schemas import BulkImportRequest, BulkImportResponse, StudentResponse

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.get("", response_model=List[StudentResponse])
async def list_students(
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        return await service.list_students(store, current_user.tenant_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/bulk", response_model=BulkImportResponse, status_code=status.HTTP_201_CREATED)
async def bulk_import(
    payload: BulkImportRequest,
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        return await service.import_students(store, current_user.tenant_id, payload.text)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    student_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        await service.delete_student(store, current_user.tenant_id, student_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/{student_id}/submissions/{session_id}/review", response_model=AnswerReviewResponse)
async def review_submission(
    student_id: str,
    session_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        return await submission_service.review_submission(store, current_user.tenant_id, student_id, session_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/{student_id}/submissions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def reset_submission(
    student_id: str,
    session_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    """Clear a submission; the student may then take the test again."""
    try:
        await submission_service.reset_submission(store, current_user.tenant_id, student_id, session_id)
    except ServiceError as e:
        raise to_http_exception(e)
