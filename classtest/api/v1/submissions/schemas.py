"""Test-taking schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from classtest.auth.schemas import ViewResponse
from classtest.core.documents import ANSWER_COUNT
from classtest.core.enums import SessionStatus


class SubmitRequest(BaseModel):
    answers: List[str] = Field(default_factory=list, max_length=ANSWER_COUNT)


class StartTestResponse(BaseModel):
    session_id: str
    title: str
    has_document: bool
    view: ViewResponse


class SubmitResponse(BaseModel):
    session_id: str
    score: int
    submitted_at: str
    view: ViewResponse


class ReviewRowResponse(BaseModel):
    no: int
    mine: str
    correct: str
    is_correct: bool


class AnswerReviewResponse(BaseModel):
    student_id: str
    session_id: str
    title: str
    stored_score: int
    submitted_at: str
    # False for submissions recorded before answers were kept
    has_answers: bool
    rows: List[ReviewRowResponse] = Field(default_factory=list)
    recomputed_score: Optional[int] = None
    unit_score: float


class DashboardSession(BaseModel):
    id: str
    title: str
    has_document: bool
    status: SessionStatus
    score: Optional[int] = None
    submitted_at: Optional[str] = None


class DashboardResponse(BaseModel):
    student_id: str
    class_group: str
    hakbun: str
    name: str
    total_score: int
    sessions: List[DashboardSession]
