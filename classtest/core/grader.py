"""
Exact-match auto grading.

Each item is worth 100 / N points (20 for the fixed five-item test). Answers are
compared after trimming surrounding whitespace; comparison is case-sensitive.
The same function scores a submission and recomputes it for review.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from classtest.core.documents import Submission

_WEEKDAYS_KO = ["월", "화", "수", "목", "금", "토", "일"]


def _clean(value: Optional[str]) -> str:
    return (value if value is not None else "").strip()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_correct(student_answer: Optional[str], correct_answer: Optional[str]) -> bool:
    return _clean(student_answer) == _clean(correct_answer)


def grade(student_answers: Sequence[Optional[str]], correct_answers: Sequence[Optional[str]]) -> int:
    """Score ``student_answers`` against the key. Missing answers count as blank."""
    total = len(correct_answers)
    if total == 0:
        return 0
    unit = 100 / total
    earned = 0.0
    for idx, correct in enumerate(correct_answers):
        mine = student_answers[idx] if idx < len(student_answers) else ""
        if is_correct(mine, correct):
            earned += unit
    return _round_half_up(earned)


@dataclass(frozen=True)
class ReviewRow:
    no: int
    mine: str
    correct: str
    is_correct: bool


@dataclass(frozen=True)
class AnswerReview:
    stored_score: int
    submitted_at: str
    # False for submissions recorded before answers were kept
    has_answers: bool
    rows: List[ReviewRow]
    recomputed_score: Optional[int]
    unit_score: float


def review(submission: Submission, correct_answers: Sequence[str]) -> AnswerReview:
    total = len(correct_answers)
    unit = 100 / total if total else 0.0
    if submission.answers is None:
        return AnswerReview(
            stored_score=submission.score,
            submitted_at=submission.submitted_at,
            has_answers=False,
            rows=[],
            recomputed_score=None,
            unit_score=unit,
        )

    rows = []
    for idx, correct in enumerate(correct_answers):
        mine = submission.answers[idx] if idx < len(submission.answers) else ""
        rows.append(ReviewRow(no=idx + 1, mine=mine, correct=correct, is_correct=is_correct(mine, correct)))
    return AnswerReview(
        stored_score=submission.score,
        submitted_at=submission.submitted_at,
        has_answers=True,
        rows=rows,
        recomputed_score=grade(submission.answers, correct_answers),
        unit_score=unit,
    )


def format_submitted_at(moment: datetime, tz_name: str = "Asia/Seoul") -> str:
    """Format like ``24.03.05(화) pm 2:07``."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(ZoneInfo(tz_name))
    hour = moment.hour % 12 or 12
    ampm = "pm" if moment.hour >= 12 else "am"
    return (
        f"{moment:%y}.{moment:%m}.{moment:%d}({_WEEKDAYS_KO[moment.weekday()]}) "
        f"{ampm} {hour}:{moment:%M}"
    )
