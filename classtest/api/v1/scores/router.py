from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Response

from classtest.auth.rbac import require_teacher
from classtest.auth.schemas import CurrentUser
from classtest.core.exceptions import ServiceError, to_http_exception
from classtest.db.session import get_store
from classtest.store.base import DocumentStore

from . import service
from .schemas import ScoreTableResponse

router = APIRouter(prefix="/api/v1/scores", tags=["scores"])


@router.get("", response_model=ScoreTableResponse)
async def score_table(
    class_group: Optional[str] = Query(None, description="Only this class; all classes when omitted"),
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        return await service.build_score_table(store, current_user.tenant_id, class_group)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/export.csv")
async def export_scores(
    class_group: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        filename, text = await service.export_csv(store, current_user.tenant_id, class_group)
    except ServiceError as e:
        raise to_http_exception(e)
    # Non-ASCII filenames go in filename* (RFC 5987); filename is the ASCII fallback
    disposition = f"attachment; filename=\"scores.csv\"; filename*=UTF-8''{quote(filename)}"
    return Response(
        content=text.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": disposition},
    )
