"""
Score table and CSV export.

Totals only count sessions that still exist; submissions left behind by a
deleted session are ignored.
"""

import csv
import io
from datetime import datetime
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from classtest.core.config import settings
from classtest.core.documents import SessionDocument, StudentDocument
from classtest.core.services import class_groups, load_sessions, load_students
from classtest.store.base import DocumentStore

from .schemas import ScoreColumn, ScoreRow, ScoreTableResponse

CSV_HEADER = ["반", "학번", "이름", "총점"]
ALL_CLASSES_LABEL = "전체"


def _score_row(student: StudentDocument, sessions: List[SessionDocument]) -> ScoreRow:
    per_session = {}
    for session in sessions:
        submission = student.scores.get(session.id)
        per_session[session.id] = submission.score if submission is not None else None
    return ScoreRow(
        student_id=student.id,
        class_group=student.class_group,
        hakbun=student.hakbun,
        name=student.name,
        total=sum(score for score in per_session.values() if score is not None),
        scores=per_session,
    )


async def build_score_table(store: DocumentStore, tenant_id: str, class_group: Optional[str] = None) -> ScoreTableResponse:
    students = await load_students(store, tenant_id)
    sessions = await load_sessions(store, tenant_id)
    selected = [s for s in students if class_group is None or s.class_group == class_group]
    selected.sort(key=lambda s: (s.hakbun, s.class_group))
    return ScoreTableResponse(
        class_group=class_group,
        classes=class_groups(students),
        sessions=[ScoreColumn(session_id=s.id, title=s.title) for s in sessions],
        rows=[_score_row(s, sessions) for s in selected],
    )


def render_csv(table: ScoreTableResponse) -> str:
    """UTF-8 text with a leading BOM so spreadsheet apps detect the encoding."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER + [column.title for column in table.sessions])
    for row in table.rows:
        cells = [row.class_group, row.hakbun, row.name, row.total]
        for column in table.sessions:
            score = row.scores.get(column.session_id)
            cells.append("" if score is None else score)
        writer.writerow(cells)
    return "\ufeff" + buffer.getvalue()


def export_filename(class_group: Optional[str], today: Optional[datetime] = None) -> str:
    today = today or datetime.now(ZoneInfo(settings.timezone))
    return f"성적_{class_group or ALL_CLASSES_LABEL}_{today:%Y-%m-%d}.csv"


async def export_csv(store: DocumentStore, tenant_id: str, class_group: Optional[str] = None) -> Tuple[str, str]:
    """Returns (filename, csv text)."""
    table = await build_score_table(store, tenant_id, class_group)
    return export_filename(class_group), render_csv(table)
