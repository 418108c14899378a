import pytest
from fastapi.testclient import TestClient

from horario.main import app
from horario.schemas.timetable import WEEKDAYS
from horario.services.time_slots import grid_slots


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def full_availability():
    return {day: list(grid_slots(block_schedule=False)) for day in WEEKDAYS}


@pytest.fixture
def make_lesson():
    def build(cohort_id, weekday, slot_label, subject_id, teacher_id, half=None):
        lesson_id = f"{cohort_id}_{weekday}_{slot_label}"
        if half is not None:
            lesson_id = f"{lesson_id}-{half}"
        return {
            "id": lesson_id,
            "cohortId": cohort_id,
            "weekday": weekday,
            "slotLabel": slot_label,
            "subjectId": subject_id,
            "teacherId": teacher_id,
        }

    return build


@pytest.fixture
def school_payload(full_availability):
    # t1/t2 are regular morning cohorts, t3 an evening block-schedule one.
    return {
        "version": "1",
        "year": 2025,
        "courses": [{"id": "c1", "name": "Informatica"}],
        "cohorts": [
            {"id": "t1", "courseId": "c1", "name": "1A", "timeOfDay": "manha"},
            {"id": "t2", "courseId": "c1", "name": "1B", "timeOfDay": "manha"},
            {"id": "t3", "courseId": "c1", "name": "1C Modular", "timeOfDay": "noite", "isBlockSchedule": True},
        ],
        "subjects": [
            {"id": "mat-a", "cohortId": "t1", "name": "Matematica", "weeklyLessonCount": 4},
            {"id": "mat-b", "cohortId": "t2", "name": "Matematica", "weeklyLessonCount": 4},
            {"id": "port-a", "cohortId": "t1", "name": "Portugues", "weeklyLessonCount": 3, "sharedGroupId": "bncc-port"},
            {"id": "port-b", "cohortId": "t2", "name": "Portugues", "weeklyLessonCount": 3, "sharedGroupId": "bncc-port"},
            {"id": "lab-a", "cohortId": "t1", "name": "Laboratorio", "weeklyLessonCount": 2, "isSplit": True, "splitTeacherCount": 2},
            {"id": "prog-c", "cohortId": "t3", "name": "Programacao", "weeklyLessonCount": 2.5},
        ],
        "teachers": [
            {"id": "p1", "name": "Ana", "availability": {day: list(slots) for day, slots in full_availability.items()}},
            {"id": "p2", "name": "Bruno", "availability": {day: list(slots) for day, slots in full_availability.items()}},
            {"id": "p3", "name": "Carla", "availability": {day: list(slots) for day, slots in full_availability.items()}},
        ],
        "assignments": [
            {"subjectId": "mat-a", "teacherIds": ["p1"]},
            {"subjectId": "mat-b", "teacherIds": ["p2"]},
            {"subjectId": "port-a", "teacherIds": ["p3"]},
            {"subjectId": "port-b", "teacherIds": ["p3"]},
            {"subjectId": "lab-a", "teacherIds": ["p1", "p2"]},
            {"subjectId": "prog-c", "teacherIds": ["p2"]},
        ],
        "lessons": [],
        "sharedGroups": [{"id": "bncc-port", "name": "Lingua Portuguesa"}],
    }
