"""Roster management: bulk import, listing and removal of students."""

import logging
import uuid
from dataclasses import dataclass
from typing import List, Tuple

from classtest.core import class_settings
from classtest.core.documents import StudentDocument
from classtest.core.paths import paths
from classtest.core.services import get_student_or_404, load_class_settings, load_students
from classtest.store.base import DocumentStore

from .schemas import BulkImportResponse, StudentResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RosterLine:
    class_group: str
    hakbun: str
    name: str
    code: str


def parse_roster(text: str) -> Tuple[List[RosterLine], int]:
    """
    Parse ``classGroup hakbun name code`` lines.

    Returns the parsed lines and the number of non-blank lines skipped for having
    fewer than four fields. Tokens past the fourth are ignored.
    """
    rows: List[RosterLine] = []
    skipped = 0
    for line in text.splitlines():
        parts = line.split()
        if not parts:
            continue
        if len(parts) < 4:
            skipped += 1
            continue
        rows.append(RosterLine(class_group=parts[0], hakbun=parts[1], name=parts[2], code=parts[3].upper()))
    return rows, skipped


def to_response(student: StudentDocument) -> StudentResponse:
    return StudentResponse(
        id=student.id,
        class_group=student.class_group,
        hakbun=student.hakbun,
        name=student.name,
        code=student.code,
        scores={sid: sub.score for sid, sub in student.scores.items()},
    )


async def list_students(store: DocumentStore, tenant_id: str) -> List[StudentResponse]:
    return [to_response(s) for s in await load_students(store, tenant_id)]


async def import_students(store: DocumentStore, tenant_id: str, text: str) -> BulkImportResponse:
    rows, skipped_lines = parse_roster(text)
    existing = {s.hakbun for s in await load_students(store, tenant_id)}

    added: List[StudentDocument] = []
    duplicates: List[str] = []
    seen_classes: List[str] = []
    for row in rows:
        if row.class_group not in seen_classes:
            seen_classes.append(row.class_group)
        if row.hakbun in existing:
            duplicates.append(row.hakbun)
            continue
        existing.add(row.hakbun)
        student = StudentDocument(
            id=uuid.uuid4().hex,
            class_group=row.class_group,
            hakbun=row.hakbun,
            name=row.name,
            code=row.code,
        )
        await store.set(paths.student(tenant_id, student.id), student.to_document())
        added.append(student)

    new_classes: List[str] = []
    if seen_classes:
        current = await load_class_settings(store, tenant_id)
        updated = class_settings.ensure_classes(current, seen_classes)
        if updated is not None:
            new_classes = [c for c in seen_classes if c in updated.default_by_class and not _has_default(current, c)]
            await store.set(paths.class_settings(tenant_id), class_settings.to_document(updated))

    logger.info(
        "Imported %d students into tenant %s (%d duplicates, %d short lines)",
        len(added),
        tenant_id,
        len(duplicates),
        skipped_lines,
    )
    return BulkImportResponse(
        added=[to_response(s) for s in added],
        skipped_lines=skipped_lines,
        skipped_duplicates=duplicates,
        new_classes=new_classes,
    )


def _has_default(settings: class_settings.ClassActiveSettings, class_group: str) -> bool:
    return class_group in class_settings.normalize(settings).default_by_class


async def delete_student(store: DocumentStore, tenant_id: str, student_id: str) -> None:
    await get_student_or_404(store, tenant_id, student_id)
    await store.delete(paths.student(tenant_id, student_id))
    logger.info("Deleted student %s from tenant %s", student_id, tenant_id)
