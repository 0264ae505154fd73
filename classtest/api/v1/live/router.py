"""
Live tenant snapshots over a websocket.

Every message is the full current state; clients replace what they hold.
Students receive only their own record and never the answer keys.
"""

import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from classtest.api.v1.sessions.service import to_response as session_response
from classtest.api.v1.students.service import to_response as student_response
from classtest.auth.dependencies import user_from_token
from classtest.auth.schemas import CurrentUser
from classtest.core import class_settings
from classtest.core.enums import UserRole
from classtest.core.tenant_context import TenantContext, TenantState
from classtest.db.session import get_store
from classtest.store.base import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["live"])


def serialize_state(state: TenantState, user: CurrentUser) -> Dict[str, Any]:
    is_teacher = user.role == UserRole.TEACHER
    students = state.students if is_teacher else [s for s in state.students if s.id == user.student_id]
    return {
        "changed": list(state.changed),
        "students": [student_response(s).model_dump() for s in students],
        "sessions": [session_response(s, include_answers=is_teacher).model_dump() for s in state.sessions],
        "classSettings": class_settings.to_document(class_settings.normalize(state.settings)),
    }


async def _send_changes(websocket: WebSocket, context: TenantContext, user: CurrentUser) -> None:
    async for state in context.changes():
        if not context.ready.is_set():
            continue
        await websocket.send_json(serialize_state(state, user))


@router.websocket("/live")
async def live(
    websocket: WebSocket,
    token: str = Query(""),
    store: DocumentStore = Depends(get_store),
):
    try:
        user = user_from_token(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    if user.role not in (UserRole.TEACHER, UserRole.STUDENT) or not user.tenant_id:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    context = TenantContext(store)
    await context.open(user.tenant_id)
    sender = asyncio.create_task(_send_changes(websocket, context, user))
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Live client %s disconnected", user.uid)
    finally:
        try:
            await context.close()
        finally:
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)
