from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from classtest.auth.rbac import require_teacher, require_tenant_member
from classtest.auth.schemas import CurrentUser
from classtest.core.enums import UserRole
from classtest.core.exceptions import ServiceError, to_http_exception
from classtest.db.session import get_store
from classtest.store.base import DocumentStore

from . import service
from .schemas import SessionResponse

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.get("", response_model=List[SessionResponse])
async def list_sessions(
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_tenant_member),
):
    """Sessions in creation order. Only teachers receive the answer keys."""
    try:
        return await service.list_sessions(
            store,
            current_user.tenant_id,
            include_answers=current_user.role == UserRole.TEACHER,
        )
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    title: str = Form(...),
    answers: List[str] = Form(default=[]),
    document: Optional[UploadFile] = File(None),
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        pdf_url = None
        if document is not None and document.filename:
            content = await document.read()
            pdf_url = service.encode_pdf(document.filename, document.content_type, content)
        return await service.create_session(store, current_user.tenant_id, title, answers, pdf_url)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/{session_id}/document")
async def get_document(
    session_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_tenant_member),
):
    try:
        content = await service.get_document(store, current_user.tenant_id, session_id)
    except ServiceError as e:
        raise to_http_exception(e)
    return Response(
        content=content,
        media_type=service.PDF_CONTENT_TYPE,
        headers={"Content-Disposition": f'inline; filename="{session_id}.pdf"'},
    )


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        await service.delete_session(store, current_user.tenant_id, session_id)
    except ServiceError as e:
        raise to_http_exception(e)
