"""
Session management: answer keys with an optional PDF worksheet.

The worksheet is stored inline on the session document as a base64 data URL,
so its size is capped by MAX_UPLOAD_KB.
"""

import base64
import binascii
import logging
import time
from typing import List, Optional

from fastapi import status

from classtest.core.config import settings
from classtest.core.documents import ANSWER_COUNT, SessionDocument
from classtest.core.exceptions import LookupNotFound, ServiceError, UploadRejected
from classtest.core.paths import paths
from classtest.core.services import get_session_or_404, load_sessions
from classtest.store.base import DocumentStore

from .schemas import SessionResponse

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
PDF_DATA_URL_PREFIX = f"data:{PDF_CONTENT_TYPE};base64,"


def to_response(session: SessionDocument, include_answers: bool) -> SessionResponse:
    return SessionResponse(
        id=session.id,
        title=session.title,
        answers=list(session.answers) if include_answers else None,
        has_document=bool(session.pdf_url),
        created_at=session.created_at,
    )


def encode_pdf(filename: Optional[str], content_type: Optional[str], content: bytes) -> str:
    """Validate an uploaded worksheet and return it as a data URL. Raises UploadRejected."""
    is_pdf = content_type == PDF_CONTENT_TYPE or (filename or "").lower().endswith(".pdf")
    if not is_pdf:
        logger.warning("Rejected upload %s (%s): not a PDF", filename, content_type)
        raise UploadRejected("Only PDF worksheets can be attached")
    limit = settings.max_upload_kb * 1024
    if len(content) > limit:
        logger.warning("Rejected upload %s: %d bytes exceeds the %d byte limit", filename, len(content), limit)
        raise UploadRejected(
            f"PDF is too large (max {settings.max_upload_kb}KB). "
            "Reduce its size or register the session without a PDF.",
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )
    return PDF_DATA_URL_PREFIX + base64.b64encode(content).decode("ascii")


def decode_pdf(data_url: str) -> bytes:
    if not data_url.startswith("data:") or ";base64," not in data_url:
        raise LookupNotFound("Document not found")
    try:
        return base64.b64decode(data_url.split(";base64,", 1)[1], validate=True)
    except (binascii.Error, ValueError):
        raise LookupNotFound("Document not found")


def _clean_answers(answers: List[str]) -> List[str]:
    if len(answers) > ANSWER_COUNT:
        raise ServiceError(
            f"A session has exactly {ANSWER_COUNT} answers",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
    return list(answers) + [""] * (ANSWER_COUNT - len(answers))


async def list_sessions(store: DocumentStore, tenant_id: str, include_answers: bool) -> List[SessionResponse]:
    return [to_response(s, include_answers) for s in await load_sessions(store, tenant_id)]


async def create_session(
    store: DocumentStore,
    tenant_id: str,
    title: str,
    answers: List[str],
    pdf_url: Optional[str] = None,
) -> SessionResponse:
    title = title.strip()
    if not title:
        raise ServiceError("Title is required", status.HTTP_422_UNPROCESSABLE_ENTITY)

    created_at = int(time.time() * 1000)
    session_id = f"s{created_at}"
    while await store.get(paths.session(tenant_id, session_id)) is not None:
        created_at += 1
        session_id = f"s{created_at}"

    session = SessionDocument(
        id=session_id,
        title=title,
        answers=_clean_answers(answers),
        pdf_url=pdf_url,
        created_at=created_at,
    )
    await store.set(paths.session(tenant_id, session.id), session.to_document())
    logger.info("Created session %s (%s) in tenant %s", session.id, session.title, tenant_id)
    return to_response(session, include_answers=True)


async def get_document(store: DocumentStore, tenant_id: str, session_id: str) -> bytes:
    session = await get_session_or_404(store, tenant_id, session_id)
    if not session.pdf_url:
        raise LookupNotFound("This session has no document")
    return decode_pdf(session.pdf_url)


async def delete_session(store: DocumentStore, tenant_id: str, session_id: str) -> None:
    """Delete a session. Submissions that reference it stay on the students."""
    await get_session_or_404(store, tenant_id, session_id)
    await store.delete(paths.session(tenant_id, session_id))
    logger.info("Deleted session %s from tenant %s", session_id, tenant_id)
