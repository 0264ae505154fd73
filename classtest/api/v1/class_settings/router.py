from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query

from classtest.auth.rbac import require_teacher
from classtest.auth.schemas import CurrentUser
from classtest.core.class_settings import DEFAULT_SCOPE
from classtest.core.exceptions import ServiceError, to_http_exception
from classtest.db.session import get_store
from classtest.store.base import DocumentStore

from . import service
from .schemas import ClassSettingsResponse, SetAllRequest, ToggleRequest

router = APIRouter(prefix="/api/v1/class-settings", tags=["class-settings"])


@router.get("", response_model=ClassSettingsResponse)
async def get_class_settings(
    scope: str = Query(DEFAULT_SCOPE, description="__default__ or a session id"),
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        return await service.get_settings(store, current_user.tenant_id, scope)
    except ServiceError as e:
        raise to_http_exception(e)


@router.put("", response_model=ClassSettingsResponse)
async def replace_class_settings(
    payload: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        return await service.replace_settings(store, current_user.tenant_id, payload)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/toggle", response_model=ClassSettingsResponse)
async def toggle_class(
    payload: ToggleRequest,
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        return await service.toggle_class(store, current_user.tenant_id, payload.class_group, payload.scope)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/set-all", response_model=ClassSettingsResponse)
async def set_all_classes(
    payload: SetAllRequest,
    store: DocumentStore = Depends(get_store),
    current_user: CurrentUser = Depends(require_teacher),
):
    try:
        return await service.set_all_classes(
            store,
            current_user.tenant_id,
            payload.value,
            payload.scope,
            payload.classes,
        )
    except ServiceError as e:
        raise to_http_exception(e)
