import pytest
from pydantic import ValidationError

from horario.schemas.highlight import DragSource
from horario.schemas.timetable import PlacedLesson, Subject, Teacher, TimetableState


def test_availability_is_sanitized():
    teacher = Teacher.model_validate(
        {
            "id": "p1",
            "name": "Ana",
            "availability": {
                "segunda": "07:10-08:00",
                "terca": ["08:00-08:50", "08:50-09:40"],
                "quarta": 42,
                "sabado": ["07:10-08:00"],
            },
        }
    )

    assert teacher.availability["segunda"] == frozenset({"07:10-08:00"})
    assert teacher.availability["terca"] == frozenset({"08:00-08:50", "08:50-09:40"})
    assert teacher.availability["quarta"] == frozenset()
    assert "sabado" not in teacher.availability
    assert teacher.is_available("terca", "08:50-09:40")
    assert not teacher.is_available("quinta", "08:50-09:40")


def test_non_mapping_availability_becomes_empty():
    teacher = Teacher.model_validate({"id": "p1", "name": "Ana", "availability": ["segunda"]})
    assert teacher.availability == {}


def test_split_teacher_count_is_normalized():
    plain = Subject.model_validate(
        {"id": "s1", "cohortId": "t1", "name": "Fisica", "weeklyLessonCount": 2, "splitTeacherCount": 4}
    )
    assert plain.split_teacher_count == 1

    split = Subject.model_validate({"id": "s2", "cohortId": "t1", "name": "Lab", "weeklyLessonCount": 2, "isSplit": True})
    assert split.split_teacher_count == 2

    with pytest.raises(ValidationError):
        Subject.model_validate(
            {"id": "s3", "cohortId": "t1", "name": "Lab", "weeklyLessonCount": 2, "isSplit": True, "splitTeacherCount": 1}
        )


def test_split_flag_is_read_after_coercion():
    plain = Subject.model_validate(
        {"id": "s1", "cohortId": "t1", "name": "Fisica", "weeklyLessonCount": 2, "isSplit": "false"}
    )
    assert plain.is_split is False
    assert plain.split_teacher_count == 1

    explicit = Subject.model_validate(
        {"id": "s2", "cohortId": "t1", "name": "Fisica", "weeklyLessonCount": 2, "isSplit": "false", "splitTeacherCount": 1}
    )
    assert explicit.split_teacher_count == 1

    split = Subject.model_validate(
        {"id": "s3", "cohortId": "t1", "name": "Lab", "weeklyLessonCount": 2, "isSplit": "true", "splitTeacherCount": "3"}
    )
    assert split.is_split is True
    assert split.split_teacher_count == 3

    with pytest.raises(ValidationError):
        Subject.model_validate({"id": "s4", "cohortId": "t1", "name": "Lab", "weeklyLessonCount": 2, "isSplit": "maybe"})


def test_blank_shared_group_is_cleared():
    subject = Subject.model_validate(
        {"id": "s1", "cohortId": "t1", "name": "Historia", "weeklyLessonCount": 2, "sharedGroupId": ""}
    )
    assert subject.shared_group_id is None


def test_lesson_rejects_malformed_slot_label():
    with pytest.raises(ValidationError):
        PlacedLesson.model_validate(
            {
                "id": "t1_segunda_7h",
                "cohortId": "t1",
                "weekday": "segunda",
                "slotLabel": "7h",
                "subjectId": "s1",
                "teacherId": "p1",
            }
        )


def test_lesson_cell_key_reads_half_suffix(make_lesson):
    lesson = PlacedLesson.model_validate(make_lesson("t1", "terca", "07:10-08:00", "lab-a", "p1", half=1))
    assert lesson.cell_key.sub_slot == 1
    assert lesson.cell_key.base.to_id() == "t1_terca_07:10-08:00"

    full = PlacedLesson.model_validate(make_lesson("t1", "terca", "07:10-08:00", "mat-a", "p1"))
    assert full.cell_key.sub_slot is None


def test_state_rejects_duplicate_ids(school_payload):
    school_payload["teachers"].append({"id": "p1", "name": "Ana Clone", "availability": {}})

    with pytest.raises(ValidationError) as excinfo:
        TimetableState.model_validate(school_payload)
    assert "Duplicate teacher id(s): p1" in str(excinfo.value)


def test_state_tolerates_dangling_references(school_payload, make_lesson):
    school_payload["lessons"] = [make_lesson("ghost", "segunda", "07:10-08:00", "nope", "nobody")]
    state = TimetableState.model_validate(school_payload)
    assert len(state.lessons) == 1


def test_drag_source_shapes():
    assert DragSource(lessonId="t1_segunda_07:10-08:00").lesson_id == "t1_segunda_07:10-08:00"
    assert DragSource(subjectId="mat-a", teacherId="p1").teacher_id == "p1"

    with pytest.raises(ValidationError):
        DragSource(subjectId="mat-a")
