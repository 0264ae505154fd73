"""Admin switches controlling which classes may submit which sessions."""

import logging
from typing import Any, List, Mapping, Optional

from fastapi import status

from classtest.core import class_settings
from classtest.core.class_settings import DEFAULT_SCOPE, ClassActiveSettings, V2Settings
from classtest.core.exceptions import ServiceError
from classtest.core.paths import paths
from classtest.core.services import class_groups, get_session_or_404, load_class_settings, load_students
from classtest.store.base import DocumentStore

from .schemas import ClassSettingsResponse, ClassSwitch

logger = logging.getLogger(__name__)


async def _known_classes(store: DocumentStore, tenant_id: str, current: ClassActiveSettings) -> List[str]:
    roster = class_groups(await load_students(store, tenant_id))
    configured = class_settings.normalize(current).default_by_class
    return sorted(set(roster) | set(configured))


async def _check_scope(store: DocumentStore, tenant_id: str, scope: str) -> None:
    if scope != DEFAULT_SCOPE:
        await get_session_or_404(store, tenant_id, scope)


def _build_response(current: ClassActiveSettings, scope: str, classes: List[str]) -> ClassSettingsResponse:
    session_id = None if scope == DEFAULT_SCOPE else scope
    return ClassSettingsResponse(
        scope=scope,
        classes=[
            ClassSwitch(class_group=c, open=class_settings.can_submit(current, c, session_id))
            for c in classes
        ],
        document=class_settings.to_document(class_settings.normalize(current)),
    )


async def _save(store: DocumentStore, tenant_id: str, updated: V2Settings) -> None:
    await store.set(paths.class_settings(tenant_id), class_settings.to_document(updated))


async def get_settings(store: DocumentStore, tenant_id: str, scope: str) -> ClassSettingsResponse:
    await _check_scope(store, tenant_id, scope)
    current = await load_class_settings(store, tenant_id)
    return _build_response(current, scope, await _known_classes(store, tenant_id, current))


async def replace_settings(store: DocumentStore, tenant_id: str, raw: Mapping[str, Any]) -> ClassSettingsResponse:
    """Store a raw settings document (either shape) in normalized form."""
    document = class_settings.normalize_document(raw)
    await store.set(paths.class_settings(tenant_id), document)
    current = class_settings.parse_settings(document)
    return _build_response(current, DEFAULT_SCOPE, await _known_classes(store, tenant_id, current))


async def toggle_class(store: DocumentStore, tenant_id: str, class_group: str, scope: str) -> ClassSettingsResponse:
    await _check_scope(store, tenant_id, scope)
    current = await load_class_settings(store, tenant_id)
    updated = class_settings.toggle(current, class_group, scope)
    await _save(store, tenant_id, updated)
    logger.info("Tenant %s toggled %s in scope %s", tenant_id, class_group, scope)
    return _build_response(updated, scope, await _known_classes(store, tenant_id, updated))


async def set_all_classes(
    store: DocumentStore,
    tenant_id: str,
    value: bool,
    scope: str,
    classes: Optional[List[str]] = None,
) -> ClassSettingsResponse:
    await _check_scope(store, tenant_id, scope)
    current = await load_class_settings(store, tenant_id)
    targets = classes if classes is not None else await _known_classes(store, tenant_id, current)
    if not targets:
        raise ServiceError("No classes to update", status.HTTP_400_BAD_REQUEST)
    updated = class_settings.set_all(current, targets, scope, value)
    await _save(store, tenant_id, updated)
    logger.info("Tenant %s set %d classes to %s in scope %s", tenant_id, len(targets), value, scope)
    return _build_response(updated, scope, await _known_classes(store, tenant_id, updated))
