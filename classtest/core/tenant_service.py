"""
Tenant service: teacher code aliases, student lookup and the teacher approval state.

- tenant_id is the approved teacher's uid; every tenant document lives under it.
- The teacher code (first 8 characters of the uid, uppercased) is the public alias
  students type. The alias row is re-published on every approved session start so
  a stale or missing row heals itself.
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple

from fastapi import status

from classtest.auth.identity import Identity
from classtest.core.documents import StudentDocument, TeacherDocument, TeacherIndexDocument
from classtest.core.enums import TeacherStatus
from classtest.core.exceptions import LookupNotFound, TeacherCodeConflict
from classtest.core.paths import paths
from classtest.store.base import DocumentStore

logger = logging.getLogger(__name__)

TEACHER_CODE_LENGTH = 8
LOGIN_FAILED_MESSAGE = "The teacher code or personal (student) code is incorrect."


def _now_ms() -> int:
    return int(time.time() * 1000)


def _clean_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def derive_teacher_code(tenant_id: str) -> str:
    """Public alias for a tenant: first 8 characters of its id, uppercased."""
    return tenant_id[:TEACHER_CODE_LENGTH].upper()


async def publish_teacher_code(store: DocumentStore, tenant_id: str, email: str) -> str:
    """
    Upsert the alias row for a tenant. Idempotent for the owning tenant.

    Raises TeacherCodeConflict when the row already points at another tenant.
    """
    code = derive_teacher_code(tenant_id)
    existing = await store.get(paths.teacher_code(code))
    owner = existing.get("tenantId") if existing else None
    if owner and owner != tenant_id:
        logger.error("Teacher code %s of tenant %s is already taken by tenant %s", code, tenant_id, owner)
        raise TeacherCodeConflict(code)
    await store.set(
        paths.teacher_code(code),
        {"tenantId": tenant_id, "email": email, "updatedAt": _now_ms()},
        merge=True,
    )
    return code


async def resolve_tenant(store: DocumentStore, teacher_code: str) -> str:
    """Teacher code -> tenant id. Raises LookupNotFound."""
    code = _clean_code(teacher_code)
    if not code:
        raise LookupNotFound("Teacher code not found")
    raw = await store.get(paths.teacher_code(code))
    if raw is None:
        raise LookupNotFound("Teacher code not found")
    row = TeacherIndexDocument.model_validate(raw)
    if not row.tenant_id:
        raise LookupNotFound("Teacher code not found")
    return row.tenant_id


async def resolve_student(store: DocumentStore, tenant_id: str, student_code: str) -> StudentDocument:
    """
    Student code -> student within one tenant. Raises LookupNotFound.

    Codes are not enforced unique; when several students share one, the first
    (by document id) wins.
    """
    code = _clean_code(student_code)
    if not code:
        raise LookupNotFound("Student code not found")
    matches = await store.find(paths.students(tenant_id), "code", code)
    if not matches:
        raise LookupNotFound("Student code not found")
    if len(matches) > 1:
        logger.warning(
            "Tenant %s has %d students sharing code %s; using %s",
            tenant_id,
            len(matches),
            code,
            matches[0].id,
        )
    return StudentDocument.model_validate(matches[0].data)


async def login_student(
    store: DocumentStore,
    teacher_code: str,
    student_code: str,
) -> Tuple[str, StudentDocument]:
    """
    Both lookups in sequence. Either failure yields the same generic error so the
    caller cannot tell which code was wrong.
    """
    try:
        tenant_id = await resolve_tenant(store, teacher_code)
        student = await resolve_student(store, tenant_id, student_code)
    except LookupNotFound as e:
        raise LookupNotFound(LOGIN_FAILED_MESSAGE, status.HTTP_401_UNAUTHORIZED) from e
    return tenant_id, student


@dataclass(frozen=True)
class TeacherSession:
    status: TeacherStatus
    email: str
    tenant_id: Optional[str] = None
    teacher_code: Optional[str] = None


async def start_teacher_session(store: DocumentStore, identity: Identity) -> TeacherSession:
    """
    Run the teacher state machine for a signed-in identity.

    anonymous -> none; no record -> create pending; approved -> re-publish alias.
    """
    if identity.is_anonymous:
        return TeacherSession(status=TeacherStatus.NONE, email="")

    email = identity.email or ""
    raw = await store.get(paths.teacher(identity.uid))
    if raw is None:
        await store.set(
            paths.teacher(identity.uid),
            {"email": email, "status": TeacherStatus.PENDING.value, "createdAt": _now_ms()},
        )
        logger.info("Teacher %s registered; awaiting approval", identity.uid)
        return TeacherSession(status=TeacherStatus.PENDING, email=email)

    teacher = TeacherDocument.model_validate(raw)
    if teacher.status != TeacherStatus.APPROVED:
        return TeacherSession(status=TeacherStatus.PENDING, email=email)

    tenant_id = identity.uid
    code = await publish_teacher_code(store, tenant_id, email)
    logger.info("Teacher %s approved; published code %s", tenant_id, code)
    return TeacherSession(status=TeacherStatus.APPROVED, email=email, tenant_id=tenant_id, teacher_code=code)


async def approve_teacher(store: DocumentStore, uid: str) -> TeacherDocument:
    """External approval action. Raises LookupNotFound for an unknown teacher."""
    raw = await store.get(paths.teacher(uid))
    if raw is None:
        raise LookupNotFound("Teacher not found")
    await store.set(paths.teacher(uid), {"status": TeacherStatus.APPROVED.value}, merge=True)
    teacher = TeacherDocument.model_validate({**raw, "status": TeacherStatus.APPROVED.value})
    logger.info("Teacher %s approved", uid)
    return teacher
