import pytest

from classtest.core import view_state
from classtest.core.view_state import InvalidTransition, View


def test_teacher_path() -> None:
    state = view_state.LoginState()
    pending = view_state.teacher_pending(state, "t@example.com")
    assert pending.view == View.TEACHER_PENDING

    admin = view_state.teacher_approved(pending, "tid", "TID00000", "t@example.com")
    assert view_state.describe(admin) == {
        "view": "admin",
        "payload": {"tenant_id": "tid", "teacher_code": "TID00000", "email": "t@example.com"},
    }
    assert isinstance(view_state.logout(admin), view_state.LoginState)


def test_student_test_round_trip() -> None:
    student = view_state.student_logged_in(view_state.LoginState(), "tid", "st1")
    testing = view_state.start_test(student, "s1")
    assert testing.view == View.TEST
    assert testing.result is None

    finished = view_state.finish_test(testing, 80)
    assert view_state.describe(finished)["payload"]["result"] == 80

    back = view_state.close_result(finished)
    assert back == view_state.StudentState(tenant_id="tid", student_id="st1")


def test_illegal_transitions() -> None:
    with pytest.raises(InvalidTransition):
        view_state.start_test(view_state.LoginState(), "s1")
    admin = view_state.AdminState(tenant_id="tid", teacher_code="T", email="e")
    with pytest.raises(InvalidTransition):
        view_state.student_logged_in(admin, "tid", "st1")

    finished = view_state.finish_test(view_state.InTestState("tid", "st1", "s1"), 100)
    with pytest.raises(InvalidTransition) as exc:
        view_state.finish_test(finished, 100)
    assert exc.value.status_code == 409


def test_error_views_carry_remediation() -> None:
    state = view_state.fail(View.AUTH_ERROR, "blocked", ["use LTE"])
    assert view_state.describe(state) == {
        "view": "authError",
        "payload": {"message": "blocked", "remediation": ["use LTE"]},
    }
    with pytest.raises(ValueError):
        view_state.fail(View.ADMIN, "nope")
