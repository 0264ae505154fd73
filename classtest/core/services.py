"""Tenant document reads shared by the API services."""

from typing import List

from classtest.core.class_settings import ClassActiveSettings, parse_settings
from classtest.core.documents import SessionDocument, StudentDocument
from classtest.core.exceptions import LookupNotFound
from classtest.core.paths import paths
from classtest.store.base import DocumentSnapshot, DocumentStore


def student_from_snapshot(doc: DocumentSnapshot) -> StudentDocument:
    return StudentDocument.model_validate({**doc.data, "id": doc.id})


def session_from_snapshot(doc: DocumentSnapshot) -> SessionDocument:
    return SessionDocument.model_validate({**doc.data, "id": doc.id})


def sort_roster(students: List[StudentDocument]) -> List[StudentDocument]:
    """Class group first, then roll number."""
    return sorted(students, key=lambda s: (s.class_group, s.hakbun))


def sort_sessions(sessions: List[SessionDocument]) -> List[SessionDocument]:
    """Creation order; ids break ties between sessions created in the same millisecond."""
    return sorted(sessions, key=lambda s: (s.created_at, s.id))


async def load_students(store: DocumentStore, tenant_id: str) -> List[StudentDocument]:
    docs = await store.list(paths.students(tenant_id))
    return sort_roster([student_from_snapshot(doc) for doc in docs])


async def load_sessions(store: DocumentStore, tenant_id: str) -> List[SessionDocument]:
    docs = await store.list(paths.sessions(tenant_id))
    return sort_sessions([session_from_snapshot(doc) for doc in docs])


async def load_class_settings(store: DocumentStore, tenant_id: str) -> ClassActiveSettings:
    return parse_settings(await store.get(paths.class_settings(tenant_id)))


async def get_student_or_404(store: DocumentStore, tenant_id: str, student_id: str) -> StudentDocument:
    raw = await store.get(paths.student(tenant_id, student_id))
    if raw is None:
        raise LookupNotFound("Student not found")
    return StudentDocument.model_validate({**raw, "id": student_id})


async def get_session_or_404(store: DocumentStore, tenant_id: str, session_id: str) -> SessionDocument:
    raw = await store.get(paths.session(tenant_id, session_id))
    if raw is None:
        raise LookupNotFound("Session not found")
    return SessionDocument.model_validate({**raw, "id": session_id})


def class_groups(students: List[StudentDocument]) -> List[str]:
    return sorted({s.class_group for s in students})
