from __future__ import annotations

from collections import defaultdict

from horario.schemas.alert import Alert, AlertKind
from horario.schemas.insights import (
    AllocatedUnitsEntry,
    CohortCompletionEntry,
    DashboardInsights,
    TeacherLessonEntry,
    TeacherLoadEntry,
    TeacherTimetable,
)
from horario.schemas.timetable import WEEKDAYS, CellKey, Period, TimetableState
from horario.services.feasibility import lesson_weight
from horario.services.shared_group import SubjectCatalog
from horario.services.time_slots import grid_slots, period_of_slot


def allocated_units(state: TimetableState) -> list[AllocatedUnitsEntry]:
    """Weighted units placed per (resolved subject, teacher), as shown next to each sidebar item."""
    catalog = SubjectCatalog.from_state(state)
    cohorts = {cohort.id: cohort for cohort in state.cohorts}
    counts: dict[tuple[str, str], float] = defaultdict(float)
    for lesson in state.lessons:
        subject_id = catalog.resolve(lesson).final_subject_id
        counts[(subject_id, lesson.teacher_id)] += lesson_weight(cohorts.get(lesson.cohort_id))
    return [
        AllocatedUnitsEntry(subject_id=subject_id, teacher_id=teacher_id, units=units)
        for (subject_id, teacher_id), units in counts.items()
    ]


def compute_insights(
    state: TimetableState,
    alerts: list[Alert],
    block_schedule: bool | None = None,
) -> DashboardInsights:
    cohorts = [
        cohort for cohort in state.cohorts
        if block_schedule is None or cohort.is_block_schedule == block_schedule
    ]
    cohorts_by_id = {cohort.id: cohort for cohort in cohorts}
    subjects = [subject for subject in state.subjects if subject.cohort_id in cohorts_by_id]
    subject_ids = {subject.id for subject in subjects}
    assigned_subject_ids = {
        assignment.subject_id for assignment in state.assignments if assignment.subject_id in subject_ids
    }
    lessons = [lesson for lesson in state.lessons if lesson.cohort_id in cohorts_by_id]
    lesson_ids = {lesson.id for lesson in lessons}
    scoped_alerts = [alert for alert in alerts if any(item in lesson_ids for item in alert.affected_lesson_ids)]

    # A split cell is one session no matter how many halves are filled.
    catalog = SubjectCatalog.from_state(state)
    sessions: dict[CellKey, str] = {}
    for lesson in lessons:
        key = lesson.cell_key.base
        if key not in sessions:
            sessions[key] = catalog.resolve(lesson).final_subject_id

    allocated_by_subject: dict[str, float] = defaultdict(float)
    period_distribution: dict[Period, int] = {"manha": 0, "tarde": 0, "noite": 0}
    for key, subject_id in sessions.items():
        allocated_by_subject[subject_id] += lesson_weight(cohorts_by_id.get(key.cohort_id))
        period_distribution[period_of_slot(key.slot_label)] += 1

    required_units = sum(subject.weekly_lesson_count for subject in subjects)
    total_allocated = sum(allocated_by_subject.values())
    completion = (total_allocated / required_units) * 100 if required_units > 0 else 0.0

    alert_counts: dict[AlertKind, int] = {}
    for alert in scoped_alerts:
        alert_counts[alert.kind] = alert_counts.get(alert.kind, 0) + 1

    teachers_by_id = {teacher.id: teacher for teacher in state.teachers}
    load: dict[str, float] = defaultdict(float)
    for lesson in lessons:
        if lesson.teacher_id in teachers_by_id:
            load[lesson.teacher_id] += lesson_weight(cohorts_by_id.get(lesson.cohort_id))
    teacher_load = sorted(
        (
            TeacherLoadEntry(teacher_id=teacher_id, name=teachers_by_id[teacher_id].name, units=units)
            for teacher_id, units in load.items()
        ),
        key=lambda entry: (-entry.units, entry.name),
    )

    cohort_completion = []
    for cohort in cohorts:
        cohort_subjects = [subject for subject in subjects if subject.cohort_id == cohort.id]
        cohort_completion.append(
            CohortCompletionEntry(
                cohort_id=cohort.id,
                name=cohort.name,
                allocated=sum(allocated_by_subject.get(subject.id, 0.0) for subject in cohort_subjects),
                required=sum(subject.weekly_lesson_count for subject in cohort_subjects),
            )
        )
    cohort_completion.sort(key=lambda entry: (entry.allocated / entry.required if entry.required else 0.0, entry.name))

    # Teachers are unassigned globally, not per curriculum.
    assigned_teacher_ids = {teacher_id for assignment in state.assignments for teacher_id in assignment.teacher_ids}

    return DashboardInsights(
        completion_percentage=completion,
        allocated_units=total_allocated,
        required_units=required_units,
        critical_alert_count=alert_counts.get(AlertKind.teacher_double_booking, 0),
        alert_counts=alert_counts,
        active_teacher_count=len({lesson.teacher_id for lesson in lessons}),
        cohort_count=len(cohorts),
        teacher_load=teacher_load,
        cohort_completion=cohort_completion,
        period_distribution=period_distribution,
        unassigned_subject_ids=[subject.id for subject in subjects if subject.id not in assigned_subject_ids],
        unassigned_teacher_ids=[teacher.id for teacher in state.teachers if teacher.id not in assigned_teacher_ids],
    )


def teacher_timetable(state: TimetableState, teacher_id: str) -> TeacherTimetable | None:
    teacher = next((item for item in state.teachers if item.id == teacher_id), None)
    if teacher is None:
        return None

    cohorts = {cohort.id: cohort for cohort in state.cohorts}
    subjects = {subject.id: subject for subject in state.subjects}
    slot_order = {label: position for position, label in enumerate(grid_slots(block_schedule=False))}

    grid: dict[str, dict[str, list[TeacherLessonEntry]]] = {}
    units = 0.0
    lessons = sorted(
        (lesson for lesson in state.lessons if lesson.teacher_id == teacher_id),
        key=lambda lesson: (
            WEEKDAYS.index(lesson.weekday),
            slot_order.get(lesson.slot_label, len(slot_order)),
            lesson.slot_label,
            lesson.id,
        ),
    )
    for lesson in lessons:
        cohort = cohorts.get(lesson.cohort_id)
        subject = subjects.get(lesson.subject_id)
        units += lesson_weight(cohort)
        grid.setdefault(lesson.weekday, {}).setdefault(lesson.slot_label, []).append(
            TeacherLessonEntry(
                lesson_id=lesson.id,
                cohort_id=lesson.cohort_id,
                cohort_name=cohort.name if cohort is not None else lesson.cohort_id,
                subject_id=lesson.subject_id,
                subject_name=subject.name if subject is not None else lesson.subject_id,
            )
        )

    return TeacherTimetable(teacher_id=teacher.id, teacher_name=teacher.name, units=units, grid=grid)
