"""Unit tests for exact-match grading and answer review."""

from datetime import datetime, timezone

from classtest.core.documents import Submission
from classtest.core.grader import format_submitted_at, grade, review

KEY = ["3", "x+1", "12", "B", "7"]


def test_all_correct_scores_100() -> None:
    assert grade(KEY, KEY) == 100


def test_trimmed_case_sensitive_comparison() -> None:
    assert grade([" 3", "x+1 ", "12", "b", "7"], KEY) == 80


def test_three_of_five_scores_60() -> None:
    assert grade(["3", "x+1", "12", "", "8"], KEY) == 60
    assert grade(["a", "b", "c", "d", "e"], ["a", "B", "c", "D", "e"]) == 60


def test_missing_answers_count_as_blank() -> None:
    assert grade(["3"], KEY) == 20
    assert grade([], KEY) == 0


def test_empty_key_scores_zero() -> None:
    assert grade(["a"], []) == 0


def test_rounds_half_up_for_other_item_counts() -> None:
    # 2 of 3 items: 66.67 -> 67; 1 of 8 items: 12.5 -> 13
    assert grade(["a", "b", ""], ["a", "b", "c"]) == 67
    assert grade(["a"] + [""] * 7, ["a"] + ["z"] * 7) == 13


def test_review_recomputes_stored_score() -> None:
    answers = ["3", "x+2", "12", "B", ""]
    submission = Submission(score=grade(answers, KEY), submitted_at="24.03.05(화) pm 2:07", answers=answers)
    result = review(submission, KEY)
    assert result.has_answers is True
    assert result.recomputed_score == result.stored_score == 60
    assert [row.is_correct for row in result.rows] == [True, False, True, True, False]
    assert result.rows[1].mine == "x+2"
    assert result.rows[1].correct == "x+1"
    assert result.unit_score == 20


def test_review_without_answers() -> None:
    result = review(Submission(score=80, submitted_at="old"), KEY)
    assert result.has_answers is False
    assert result.rows == []
    assert result.recomputed_score is None
    assert result.stored_score == 80


def test_format_submitted_at_uses_local_time() -> None:
    # 2024-03-05 05:07 UTC is 14:07 in Seoul, a Tuesday
    moment = datetime(2024, 3, 5, 5, 7, tzinfo=timezone.utc)
    assert format_submitted_at(moment, "Asia/Seoul") == "24.03.05(화) pm 2:07"


def test_format_submitted_at_twelve_hour_clock() -> None:
    midnight = datetime(2024, 3, 4, 0, 5)
    noon = datetime(2024, 3, 4, 12, 30)
    assert format_submitted_at(midnight) == "24.03.04(월) am 12:05"
    assert format_submitted_at(noon) == "24.03.04(월) pm 12:30"
