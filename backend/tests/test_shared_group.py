import pytest

from horario.schemas.timetable import PlacedLesson, TimetableState
from horario.services.shared_group import SubjectCatalog, is_valid_shared_swap, resolve_subject


@pytest.fixture
def state(school_payload):
    return TimetableState.model_validate(school_payload)


def place(make_lesson, *args):
    return PlacedLesson.model_validate(make_lesson(*args))


def test_home_cohort_is_not_a_swap(state, make_lesson):
    lesson = place(make_lesson, "t1", "segunda", "07:10-08:00", "port-a", "p3")
    resolution = resolve_subject(lesson, state)

    assert resolution.final_subject_id == "port-a"
    assert resolution.is_swap is False


def test_shared_subject_resolves_to_counterpart(state, make_lesson):
    lesson = place(make_lesson, "t2", "segunda", "07:10-08:00", "port-a", "p3")
    resolution = resolve_subject(lesson, state)

    assert resolution.final_subject_id == "port-b"
    assert resolution.is_swap is True

    assignments = {assignment.subject_id: assignment for assignment in state.assignments}
    assert is_valid_shared_swap(lesson, resolution, assignments)


def test_swap_needs_teacher_on_counterpart(state, make_lesson):
    lesson = place(make_lesson, "t2", "segunda", "07:10-08:00", "port-a", "p1")
    resolution = SubjectCatalog.from_state(state).resolve(lesson)
    assignments = {assignment.subject_id: assignment for assignment in state.assignments}

    assert resolution.final_subject_id == "port-b"
    assert not is_valid_shared_swap(lesson, resolution, assignments)


def test_non_shared_subject_keeps_its_id_when_moved(state, make_lesson):
    lesson = place(make_lesson, "t2", "segunda", "07:10-08:00", "mat-a", "p1")
    resolution = resolve_subject(lesson, state)

    assert resolution.final_subject_id == "mat-a"
    assert resolution.is_swap is True
    assert not is_valid_shared_swap(lesson, resolution, {})


def test_unknown_subject_is_left_alone(state, make_lesson):
    lesson = place(make_lesson, "t2", "segunda", "07:10-08:00", "missing", "p1")
    resolution = resolve_subject(lesson, state)

    assert resolution.final_subject_id == "missing"
    assert resolution.is_swap is False
