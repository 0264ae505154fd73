"""Teacher code aliases, student lookup and the teacher approval state."""

import logging

import pytest

from classtest.auth.identity import Identity
from classtest.core.enums import TeacherStatus
from classtest.core.exceptions import LookupNotFound, TeacherCodeConflict
from classtest.core.paths import paths
from classtest.core.tenant_service import (
    LOGIN_FAILED_MESSAGE,
    approve_teacher,
    derive_teacher_code,
    login_student,
    publish_teacher_code,
    resolve_student,
    resolve_tenant,
    start_teacher_session,
)
from classtest.store.memory import InMemoryDocumentStore

TENANT_ID = "abcdef12345678"


async def _add_student(store: InMemoryDocumentStore, student_id: str, code: str) -> None:
    await store.set(
        paths.student(TENANT_ID, student_id),
        {"id": student_id, "classGroup": "A", "hakbun": student_id, "name": "S", "code": code, "scores": {}},
    )


def test_derive_teacher_code() -> None:
    assert derive_teacher_code("abcdef1234") == "ABCDEF12"


@pytest.mark.asyncio
async def test_resolve_tenant_trims_and_uppercases() -> None:
    store = InMemoryDocumentStore()
    code = await publish_teacher_code(store, TENANT_ID, "t@example.com")
    assert code == "ABCDEF12"
    assert await resolve_tenant(store, "  abcdef12 ") == TENANT_ID


@pytest.mark.asyncio
async def test_resolve_tenant_missing_row_or_tenant_id() -> None:
    store = InMemoryDocumentStore()
    with pytest.raises(LookupNotFound):
        await resolve_tenant(store, "NOPE0000")
    await store.set(paths.teacher_code("EMPTY000"), {"email": "x@example.com"})
    with pytest.raises(LookupNotFound):
        await resolve_tenant(store, "EMPTY000")
    with pytest.raises(LookupNotFound):
        await resolve_tenant(store, "   ")


@pytest.mark.asyncio
async def test_publish_is_idempotent_merge() -> None:
    store = InMemoryDocumentStore()
    await store.set(paths.teacher_code("ABCDEF12"), {"note": "kept"})
    await publish_teacher_code(store, TENANT_ID, "t@example.com")
    await publish_teacher_code(store, TENANT_ID, "t@example.com")
    row = await store.get(paths.teacher_code("ABCDEF12"))
    assert row["tenantId"] == TENANT_ID
    assert row["note"] == "kept"


@pytest.mark.asyncio
async def test_publish_refuses_code_owned_by_another_tenant(caplog: pytest.LogCaptureFixture) -> None:
    store = InMemoryDocumentStore()
    await publish_teacher_code(store, TENANT_ID, "first@example.com")

    other_tenant = "abcdef12ffffffff"
    with caplog.at_level(logging.ERROR, logger="classtest.core.tenant_service"):
        with pytest.raises(TeacherCodeConflict) as conflict:
            await publish_teacher_code(store, other_tenant, "second@example.com")
    assert conflict.value.status_code == 409
    assert "already taken by tenant" in caplog.text

    row = await store.get(paths.teacher_code("ABCDEF12"))
    assert row["tenantId"] == TENANT_ID
    assert row["email"] == "first@example.com"
    assert await resolve_tenant(store, "ABCDEF12") == TENANT_ID


@pytest.mark.asyncio
async def test_resolve_student_first_match_wins(caplog: pytest.LogCaptureFixture) -> None:
    store = InMemoryDocumentStore()
    await _add_student(store, "s2", "DUP")
    await _add_student(store, "s1", "DUP")
    with caplog.at_level(logging.WARNING, logger="classtest.core.tenant_service"):
        student = await resolve_student(store, TENANT_ID, " dup ")
    assert student.id == "s1"
    assert "sharing code DUP" in caplog.text


@pytest.mark.asyncio
async def test_login_student_failures_are_indistinguishable() -> None:
    store = InMemoryDocumentStore()
    await publish_teacher_code(store, TENANT_ID, "t@example.com")
    await _add_student(store, "s1", "K7Q2")

    with pytest.raises(LookupNotFound) as bad_teacher:
        await login_student(store, "WRONG000", "K7Q2")
    with pytest.raises(LookupNotFound) as bad_student:
        await login_student(store, "ABCDEF12", "NOPE")

    assert bad_teacher.value.message == bad_student.value.message == LOGIN_FAILED_MESSAGE
    assert bad_teacher.value.status_code == bad_student.value.status_code == 401

    tenant_id, student = await login_student(store, "abcdef12", "k7q2")
    assert tenant_id == TENANT_ID
    assert student.id == "s1"


@pytest.mark.asyncio
async def test_teacher_session_state_machine() -> None:
    store = InMemoryDocumentStore()
    anonymous = await start_teacher_session(store, Identity(uid="anon"))
    assert anonymous.status == TeacherStatus.NONE

    identity = Identity(uid=TENANT_ID, email="t@example.com", is_anonymous=False)
    first = await start_teacher_session(store, identity)
    assert first.status == TeacherStatus.PENDING
    assert (await store.get(paths.teacher(TENANT_ID)))["status"] == "pending"

    again = await start_teacher_session(store, identity)
    assert again.status == TeacherStatus.PENDING
    assert await store.get(paths.teacher_code("ABCDEF12")) is None

    await approve_teacher(store, TENANT_ID)
    approved = await start_teacher_session(store, identity)
    assert approved.status == TeacherStatus.APPROVED
    assert approved.tenant_id == TENANT_ID
    assert approved.teacher_code == "ABCDEF12"
    assert (await store.get(paths.teacher_code("ABCDEF12")))["tenantId"] == TENANT_ID


@pytest.mark.asyncio
async def test_approved_session_republishes_deleted_alias() -> None:
    store = InMemoryDocumentStore()
    identity = Identity(uid=TENANT_ID, email="t@example.com", is_anonymous=False)
    await start_teacher_session(store, identity)
    await approve_teacher(store, TENANT_ID)
    await start_teacher_session(store, identity)

    await store.delete(paths.teacher_code("ABCDEF12"))
    await start_teacher_session(store, identity)
    assert await resolve_tenant(store, "ABCDEF12") == TENANT_ID


@pytest.mark.asyncio
async def test_approve_unknown_teacher() -> None:
    with pytest.raises(LookupNotFound):
        await approve_teacher(InMemoryDocumentStore(), "ghost")
