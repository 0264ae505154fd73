"""
Test taking: start gate, grading, answer review and administrative reset.

A submission is written once per (student, session). There is no compare-and-set
against a concurrent second submission; the already-submitted check is a plain
read before the write.
"""

import logging
from datetime import datetime, timezone
from typing import List, Tuple

from classtest.auth.schemas import ViewResponse
from classtest.core import view_state
from classtest.core.class_settings import can_submit
from classtest.core.config import settings
from classtest.core.documents import ANSWER_COUNT, SessionDocument, StudentDocument, Submission
from classtest.core.enums import SessionStatus
from classtest.core.exceptions import AlreadySubmitted, LookupNotFound, SubmissionClosed
from classtest.core.grader import format_submitted_at, grade, review
from classtest.core.paths import paths
from classtest.core.services import (
    get_session_or_404,
    get_student_or_404,
    load_class_settings,
    load_sessions,
)
from classtest.store.base import DELETE_FIELD, DocumentStore

from .schemas import (
    AnswerReviewResponse,
    DashboardResponse,
    DashboardSession,
    ReviewRowResponse,
    StartTestResponse,
    SubmitResponse,
)

logger = logging.getLogger(__name__)


def _pad_answers(answers: List[str]) -> List[str]:
    padded = [a if a is not None else "" for a in answers[:ANSWER_COUNT]]
    return padded + [""] * (ANSWER_COUNT - len(padded))


async def _gate(
    store: DocumentStore, tenant_id: str, student_id: str, session_id: str
) -> Tuple[StudentDocument, SessionDocument]:
    student = await get_student_or_404(store, tenant_id, student_id)
    session = await get_session_or_404(store, tenant_id, session_id)
    if session_id in student.scores:
        raise AlreadySubmitted()
    current = await load_class_settings(store, tenant_id)
    if not can_submit(current, student.class_group, session_id):
        raise SubmissionClosed()
    return student, session


async def start_test(store: DocumentStore, tenant_id: str, student_id: str, session_id: str) -> StartTestResponse:
    _, session = await _gate(store, tenant_id, student_id, session_id)
    state = view_state.start_test(view_state.StudentState(tenant_id=tenant_id, student_id=student_id), session_id)
    return StartTestResponse(
        session_id=session.id,
        title=session.title,
        has_document=bool(session.pdf_url),
        view=ViewResponse(**view_state.describe(state)),
    )


async def submit_test(
    store: DocumentStore,
    tenant_id: str,
    student_id: str,
    session_id: str,
    answers: List[str],
) -> SubmitResponse:
    student, session = await _gate(store, tenant_id, student_id, session_id)
    raw_answers = _pad_answers(answers)
    submission = Submission(
        score=grade(raw_answers, session.answers),
        submitted_at=format_submitted_at(datetime.now(timezone.utc), settings.timezone),
        answers=raw_answers,
    )
    await store.set(
        paths.student(tenant_id, student_id),
        {"scores": {session_id: submission.to_document()}},
        merge=True,
    )
    logger.info(
        "Student %s submitted session %s in tenant %s: %d",
        student.id,
        session_id,
        tenant_id,
        submission.score,
    )

    state = view_state.start_test(view_state.StudentState(tenant_id=tenant_id, student_id=student_id), session_id)
    state = view_state.finish_test(state, submission.score)
    return SubmitResponse(
        session_id=session_id,
        score=submission.score,
        submitted_at=submission.submitted_at,
        view=ViewResponse(**view_state.describe(state)),
    )


async def review_submission(
    store: DocumentStore, tenant_id: str, student_id: str, session_id: str
) -> AnswerReviewResponse:
    student = await get_student_or_404(store, tenant_id, student_id)
    session = await get_session_or_404(store, tenant_id, session_id)
    submission = student.scores.get(session_id)
    if submission is None:
        raise LookupNotFound("Submission not found")

    result = review(submission, session.answers)
    return AnswerReviewResponse(
        student_id=student.id,
        session_id=session.id,
        title=session.title,
        stored_score=result.stored_score,
        submitted_at=result.submitted_at,
        has_answers=result.has_answers,
        rows=[
            ReviewRowResponse(no=row.no, mine=row.mine, correct=row.correct, is_correct=row.is_correct)
            for row in result.rows
        ],
        recomputed_score=result.recomputed_score,
        unit_score=result.unit_score,
    )


async def reset_submission(store: DocumentStore, tenant_id: str, student_id: str, session_id: str) -> None:
    """Remove a submission so the student can take the test again."""
    student = await get_student_or_404(store, tenant_id, student_id)
    if session_id not in student.scores:
        raise LookupNotFound("Submission not found")
    await store.update(paths.student(tenant_id, student_id), {f"scores.{session_id}": DELETE_FIELD})
    logger.info("Reset submission %s for student %s in tenant %s", session_id, student_id, tenant_id)


async def student_dashboard(store: DocumentStore, tenant_id: str, student_id: str) -> DashboardResponse:
    student = await get_student_or_404(store, tenant_id, student_id)
    sessions = await load_sessions(store, tenant_id)
    current = await load_class_settings(store, tenant_id)

    rows: List[DashboardSession] = []
    total = 0
    for session in sessions:
        submission = student.scores.get(session.id)
        if submission is not None:
            total += submission.score
            status = SessionStatus.COMPLETED
        elif can_submit(current, student.class_group, session.id):
            status = SessionStatus.OPEN
        else:
            status = SessionStatus.CLOSED
        rows.append(
            DashboardSession(
                id=session.id,
                title=session.title,
                has_document=bool(session.pdf_url),
                status=status,
                score=submission.score if submission is not None else None,
                submitted_at=submission.submitted_at if submission is not None else None,
            )
        )

    return DashboardResponse(
        student_id=student.id,
        class_group=student.class_group,
        hakbun=student.hakbun,
        name=student.name,
        total_score=total,
        sessions=rows,
    )
