from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from horario.schemas.alert import AlertKind
from horario.schemas.timetable import Period, PlacedLesson, TimetableState


class TeacherLoadEntry(BaseModel):
    teacher_id: str = Field(alias="teacherId")
    name: str
    units: float

    model_config = ConfigDict(populate_by_name=True)


class CohortCompletionEntry(BaseModel):
    cohort_id: str = Field(alias="cohortId")
    name: str
    allocated: float
    required: float

    model_config = ConfigDict(populate_by_name=True)


class AllocatedUnitsEntry(BaseModel):
    subject_id: str = Field(alias="subjectId")
    teacher_id: str = Field(alias="teacherId")
    units: float

    model_config = ConfigDict(populate_by_name=True)


class DashboardInsights(BaseModel):
    completion_percentage: float = Field(alias="completionPercentage")
    allocated_units: float = Field(alias="allocatedUnits")
    required_units: float = Field(alias="requiredUnits")
    critical_alert_count: int = Field(alias="criticalAlertCount")
    alert_counts: dict[AlertKind, int] = Field(default_factory=dict, alias="alertCounts")
    active_teacher_count: int = Field(alias="activeTeacherCount")
    cohort_count: int = Field(alias="cohortCount")
    teacher_load: list[TeacherLoadEntry] = Field(default_factory=list, alias="teacherLoad")
    cohort_completion: list[CohortCompletionEntry] = Field(default_factory=list, alias="cohortCompletion")
    period_distribution: dict[Period, int] = Field(default_factory=dict, alias="periodDistribution")
    unassigned_subject_ids: list[str] = Field(default_factory=list, alias="unassignedSubjectIds")
    unassigned_teacher_ids: list[str] = Field(default_factory=list, alias="unassignedTeacherIds")

    model_config = ConfigDict(populate_by_name=True)


class InsightsRequest(BaseModel):
    state: TimetableState
    block_schedule: bool | None = Field(default=None, alias="blockSchedule")

    model_config = ConfigDict(populate_by_name=True)


class TeacherLessonEntry(BaseModel):
    lesson_id: str = Field(alias="lessonId")
    cohort_id: str = Field(alias="cohortId")
    cohort_name: str = Field(alias="cohortName")
    subject_id: str = Field(alias="subjectId")
    subject_name: str = Field(alias="subjectName")

    model_config = ConfigDict(populate_by_name=True)


class TeacherTimetable(BaseModel):
    teacher_id: str = Field(alias="teacherId")
    teacher_name: str = Field(alias="teacherName")
    units: float
    # weekday -> slot label -> lessons taught there
    grid: dict[str, dict[str, list[TeacherLessonEntry]]] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


class PopulateRequest(BaseModel):
    state: TimetableState
    block_schedule: bool = Field(default=False, alias="blockSchedule")
    seed: int | None = None

    model_config = ConfigDict(populate_by_name=True)


class PopulateResult(BaseModel):
    lessons: list[PlacedLesson] = Field(default_factory=list)
    added_count: int = Field(default=0, alias="addedCount")
    unplaced_subject_ids: list[str] = Field(default_factory=list, alias="unplacedSubjectIds")

    model_config = ConfigDict(populate_by_name=True)
