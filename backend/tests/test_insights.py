import pytest

from horario.schemas.alert import AlertKind
from horario.schemas.timetable import TimetableState
from horario.services.insights import allocated_units, compute_insights, teacher_timetable
from horario.services.validation import validate


@pytest.fixture
def populated_state(school_payload, make_lesson):
    school_payload["teachers"].append({"id": "p4", "name": "Diego", "availability": {}})
    school_payload["lessons"] = [
        make_lesson("t1", "segunda", "07:10-08:00", "mat-a", "p1"),
        make_lesson("t1", "segunda", "08:00-08:50", "mat-a", "p1"),
        make_lesson("t1", "terca", "07:10-08:00", "lab-a", "p1", half=0),
        make_lesson("t1", "terca", "07:10-08:00", "lab-a", "p2", half=1),
        make_lesson("t2", "segunda", "07:10-08:00", "port-a", "p3"),
        make_lesson("t3", "quarta", "19:00-19:50", "prog-c", "p2"),
    ]
    return TimetableState.model_validate(school_payload)


def test_allocated_units_follow_resolved_subject(populated_state):
    units = {(entry.subject_id, entry.teacher_id): entry.units for entry in allocated_units(populated_state)}

    assert units[("mat-a", "p1")] == 2
    assert units[("lab-a", "p1")] == 1
    assert units[("lab-a", "p2")] == 1
    assert units[("port-b", "p3")] == 1
    assert ("port-a", "p3") not in units
    assert units[("prog-c", "p2")] == 1.25


def test_insights_for_regular_curriculum(populated_state):
    insights = compute_insights(populated_state, validate(populated_state, timestamp=0), block_schedule=False)

    # mat-a 2 + lab-a 1 (two halves, one session) + port-b 1
    assert insights.allocated_units == 4
    assert insights.required_units == 4 + 4 + 3 + 3 + 2
    assert insights.completion_percentage == pytest.approx(4 / 16 * 100)
    assert insights.cohort_count == 2
    assert insights.period_distribution == {"manha": 4, "tarde": 0, "noite": 0}
    assert insights.critical_alert_count == 0
    assert insights.active_teacher_count == 3

    load = [(entry.teacher_id, entry.units) for entry in insights.teacher_load]
    assert load == [("p1", 3), ("p2", 1), ("p3", 1)]

    completion = {entry.cohort_id: (entry.allocated, entry.required) for entry in insights.cohort_completion}
    assert completion == {"t1": (3, 9), "t2": (1, 7)}
    assert [entry.cohort_id for entry in insights.cohort_completion] == ["t2", "t1"]

    assert insights.unassigned_subject_ids == []
    assert insights.unassigned_teacher_ids == ["p4"]


def test_insights_for_block_curriculum(populated_state):
    insights = compute_insights(populated_state, [], block_schedule=True)

    assert insights.cohort_count == 1
    assert insights.allocated_units == 1.25
    assert insights.required_units == 2.5
    assert insights.completion_percentage == pytest.approx(50)
    assert insights.period_distribution["noite"] == 1
    assert [entry.teacher_id for entry in insights.teacher_load] == ["p2"]


def test_insights_count_alerts_in_scope(school_payload, make_lesson):
    school_payload["lessons"] = [
        make_lesson("t1", "sexta", "07:10-08:00", "mat-a", "p1"),
        make_lesson("t2", "sexta", "07:10-08:00", "mat-b", "p1"),
    ]
    state = TimetableState.model_validate(school_payload)
    insights = compute_insights(state, validate(state, timestamp=0))

    assert insights.critical_alert_count == 1
    assert insights.alert_counts == {AlertKind.teacher_double_booking: 1}

    block_only = compute_insights(state, validate(state, timestamp=0), block_schedule=True)
    assert block_only.critical_alert_count == 0


def test_unassigned_subjects_are_listed(school_payload):
    school_payload["assignments"] = [
        assignment for assignment in school_payload["assignments"] if assignment["subjectId"] != "mat-b"
    ]
    state = TimetableState.model_validate(school_payload)
    insights = compute_insights(state, [])

    assert insights.unassigned_subject_ids == ["mat-b"]
    assert insights.completion_percentage == 0


def test_teacher_timetable_groups_by_day_and_slot(populated_state):
    timetable = teacher_timetable(populated_state, "p2")

    assert timetable.teacher_name == "Bruno"
    assert timetable.units == 2.25
    assert list(timetable.grid) == ["terca", "quarta"]
    entry = timetable.grid["quarta"]["19:00-19:50"][0]
    assert entry.cohort_name == "1C Modular"
    assert entry.subject_name == "Programacao"


def test_teacher_timetable_unknown_teacher(populated_state):
    assert teacher_timetable(populated_state, "ghost") is None
