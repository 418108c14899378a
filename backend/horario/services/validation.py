from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from time import perf_counter

from horario.schemas.alert import HARD_ALERT_KINDS, Alert, AlertKind
from horario.schemas.timetable import Assignment, Cohort, PlacedLesson, Teacher, TimetableState
from horario.services.feasibility import TeacherSchedule
from horario.services.shared_group import SubjectCatalog, is_valid_shared_swap

logger = logging.getLogger(__name__)

BookingKey = tuple[str, str, str]


@dataclass
class ValidationIndex:
    """Lookups built once per validation pass, each linear in the lesson count."""

    state: TimetableState
    timestamp: int
    teachers: dict[str, Teacher]
    cohorts: dict[str, Cohort]
    subjects: SubjectCatalog
    assignments: dict[str, Assignment]
    lessons_by_teacher: dict[str, list[PlacedLesson]]
    lessons_by_booking: dict[BookingKey, list[PlacedLesson]]
    schedules: dict[str, TeacherSchedule]

    @classmethod
    def build(cls, state: TimetableState, timestamp: int) -> "ValidationIndex":
        cohorts = {cohort.id: cohort for cohort in state.cohorts}
        lessons_by_teacher: dict[str, list[PlacedLesson]] = defaultdict(list)
        lessons_by_booking: dict[BookingKey, list[PlacedLesson]] = defaultdict(list)
        for lesson in state.lessons:
            lessons_by_teacher[lesson.teacher_id].append(lesson)
            lessons_by_booking[(lesson.teacher_id, lesson.weekday, lesson.slot_label)].append(lesson)

        teachers = {teacher.id: teacher for teacher in state.teachers}
        schedules = {
            teacher_id: TeacherSchedule(teacher_id, lessons_by_teacher.get(teacher_id, ()), cohorts)
            for teacher_id in teachers
        }
        return cls(
            state=state,
            timestamp=timestamp,
            teachers=teachers,
            cohorts=cohorts,
            subjects=SubjectCatalog.from_state(state),
            assignments={assignment.subject_id: assignment for assignment in state.assignments},
            lessons_by_teacher=lessons_by_teacher,
            lessons_by_booking=lessons_by_booking,
            schedules=schedules,
        )

    def make_alert(self, kind: AlertKind, alert_id: str, detail: str, lesson_ids: list[str]) -> Alert:
        return Alert(
            id=alert_id,
            kind=kind,
            severity="hard" if kind in HARD_ALERT_KINDS else "soft",
            detail=detail,
            timestamp=self.timestamp,
            affected_lesson_ids=lesson_ids,
        )

    def teacher_name(self, teacher_id: str) -> str:
        teacher = self.teachers.get(teacher_id)
        return teacher.name if teacher is not None else "Unknown"

    def cohort_name(self, cohort_id: str) -> str:
        cohort = self.cohorts.get(cohort_id)
        return cohort.name if cohort is not None else f"invalid id ({cohort_id})"


def teacher_double_booking_alerts(index: ValidationIndex) -> list[Alert]:
    alerts: list[Alert] = []
    for (teacher_id, weekday, slot_label), lessons in index.lessons_by_booking.items():
        if len(lessons) < 2:
            continue
        alerts.append(
            index.make_alert(
                AlertKind.teacher_double_booking,
                f"conflito-horario-{teacher_id}-{weekday}-{slot_label}",
                f"Critical: teacher {index.teacher_name(teacher_id)} is in {len(lessons)} places "
                f"at once on {weekday} at {slot_label}.",
                sorted(lesson.id for lesson in lessons),
            )
        )
    return alerts


def wrong_cohort_alerts(index: ValidationIndex) -> list[Alert]:
    alerts: list[Alert] = []
    for lesson in index.state.lessons:
        subject = index.subjects.get(lesson.subject_id)
        if subject is None:
            logger.debug("Lesson %s references unknown subject %s", lesson.id, lesson.subject_id)
            continue
        if subject.cohort_id == lesson.cohort_id:
            continue
        resolution = index.subjects.resolve(lesson)
        if is_valid_shared_swap(lesson, resolution, index.assignments):
            continue
        alerts.append(
            index.make_alert(
                AlertKind.wrong_cohort,
                f"turma-errada-{lesson.id}",
                f"Subject {subject.name} of cohort {index.cohort_name(subject.cohort_id)} "
                f"was placed in cohort {index.cohort_name(lesson.cohort_id)}.",
                [lesson.id],
            )
        )
    return alerts


def rest_period_alerts(index: ValidationIndex) -> list[Alert]:
    alerts: list[Alert] = []
    for teacher_id, schedule in index.schedules.items():
        for first_day, second_day in schedule.rest_violations():
            lesson_ids = [
                lesson.id
                for lesson in index.lessons_by_teacher.get(teacher_id, ())
                if lesson.weekday in (first_day, second_day)
            ]
            alerts.append(
                index.make_alert(
                    AlertKind.rest_period,
                    f"intersticio-{teacher_id}-{first_day}-{second_day}",
                    f"Teacher {index.teacher_name(teacher_id)} has less than 11h of rest "
                    f"between {first_day} and {second_day}.",
                    lesson_ids,
                )
            )
    return alerts


def daily_overload_alerts(index: ValidationIndex) -> list[Alert]:
    alerts: list[Alert] = []
    for teacher_id, schedule in index.schedules.items():
        for weekday in schedule.overloaded_days():
            alerts.append(
                index.make_alert(
                    AlertKind.daily_overload,
                    f"max-aulas-{teacher_id}-{weekday}",
                    f"Teacher {index.teacher_name(teacher_id)} has the equivalent of "
                    f"{schedule.units[weekday]:g} lessons on {weekday}.",
                    [lesson.id for lesson in schedule.lessons_by_day[weekday]],
                )
            )
    return alerts


def split_availability_alerts(index: ValidationIndex) -> list[Alert]:
    alerts: list[Alert] = []
    for lesson in index.state.lessons:
        subject = index.subjects.get(lesson.subject_id)
        if subject is None or not subject.is_split:
            continue
        assignment = index.assignments.get(subject.id)
        if assignment is None or len(assignment.teacher_ids) <= 1:
            continue
        for teacher_id in assignment.teacher_ids:
            teacher = index.teachers.get(teacher_id)
            if teacher is None or teacher.is_available(lesson.weekday, lesson.slot_label):
                continue
            alerts.append(
                index.make_alert(
                    AlertKind.split_availability,
                    f"conflito-divisao-{lesson.id}-{teacher_id}",
                    f"Split subject conflict: {subject.name}. "
                    f"Teacher {teacher.name} is unavailable at this slot.",
                    [lesson.id],
                )
            )
    return alerts


def outside_availability_alerts(index: ValidationIndex) -> list[Alert]:
    alerts: list[Alert] = []
    for lesson in index.state.lessons:
        teacher = index.teachers.get(lesson.teacher_id)
        if teacher is None:
            logger.debug("Lesson %s references unknown teacher %s", lesson.id, lesson.teacher_id)
            continue
        if teacher.is_available(lesson.weekday, lesson.slot_label):
            continue
        subject = index.subjects.get(lesson.subject_id)
        subject_name = subject.name if subject is not None else lesson.subject_id
        alerts.append(
            index.make_alert(
                AlertKind.outside_availability,
                f"indisponivel-{lesson.id}",
                f"Lesson of {subject_name} for {teacher.name} is outside their availability.",
                [lesson.id],
            )
        )
    return alerts


Rule = Callable[[ValidationIndex], list[Alert]]

RULES: tuple[Rule, ...] = (
    teacher_double_booking_alerts,
    wrong_cohort_alerts,
    rest_period_alerts,
    daily_overload_alerts,
    split_availability_alerts,
    outside_availability_alerts,
)


def validate(state: TimetableState, *, timestamp: int | None = None) -> list[Alert]:
    """Derive every active alert for ``state``.

    Pure apart from reading the clock when no ``timestamp`` is given; the
    alert ids and contents depend only on the snapshot.
    """
    started = perf_counter()
    if timestamp is None:
        timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)
    index = ValidationIndex.build(state, timestamp)

    unique: dict[str, Alert] = {}
    for rule in RULES:
        for alert in rule(index):
            unique[alert.id] = alert

    logger.debug(
        "Validated %d lessons into %d alerts in %.2f ms",
        len(state.lessons),
        len(unique),
        (perf_counter() - started) * 1000,
    )
    return list(unique.values())
