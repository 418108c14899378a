from __future__ import annotations

import logging
import math
import random

from horario.schemas.insights import PopulateResult
from horario.schemas.timetable import WEEKDAYS, CellKey, Cohort, PlacedLesson, Subject, TimetableState
from horario.services.feasibility import TeacherSchedule, lesson_weight
from horario.services.time_slots import period_slots

logger = logging.getLogger(__name__)


def sessions_needed(subject: Subject, cohort: Cohort, placed_sessions: int) -> int:
    weight = lesson_weight(cohort)
    # Half-up rounding: 2.5 weekly units means three sessions.
    return max(math.floor(subject.weekly_lesson_count / weight + 0.5) - placed_sessions, 0)


def populate_grid(state: TimetableState, block_schedule: bool, seed: int | None = None) -> PopulateResult:
    """Place every missing session of the chosen curriculum into a free cell.

    A cell is only taken when no placed teacher would be double-booked,
    overloaded or left without rest; availability misses are accepted and
    surface later as alerts.
    """
    rng = random.Random(seed)
    all_cohorts = {cohort.id: cohort for cohort in state.cohorts}
    cohorts = {cohort_id: cohort for cohort_id, cohort in all_cohorts.items() if cohort.is_block_schedule == block_schedule}
    subjects = {subject.id: subject for subject in state.subjects}
    teachers = {teacher.id: teacher for teacher in state.teachers}

    lessons = list(state.lessons)
    occupied_cells = {lesson.cell_key.base for lesson in lessons}
    sessions_by_subject: dict[str, set[CellKey]] = {}
    for lesson in lessons:
        sessions_by_subject.setdefault(lesson.subject_id, set()).add(lesson.cell_key.base)

    requests: list[tuple[Subject, tuple[str, ...]]] = []
    for assignment in state.assignments:
        subject = subjects.get(assignment.subject_id)
        if subject is None or subject.cohort_id not in cohorts or not assignment.teacher_ids:
            continue
        placed = len(sessions_by_subject.get(subject.id, ()))
        count = sessions_needed(subject, cohorts[subject.cohort_id], placed)
        requests.extend([(subject, assignment.teacher_ids)] * count)
    rng.shuffle(requests)

    schedules: dict[str, TeacherSchedule] = {}

    def schedule_for(teacher_id: str) -> TeacherSchedule:
        if teacher_id not in schedules:
            schedules[teacher_id] = TeacherSchedule(teacher_id, lessons, all_cohorts)
        return schedules[teacher_id]

    added: list[PlacedLesson] = []
    unplaced: list[str] = []
    for subject, teacher_ids in requests:
        cohort = cohorts[subject.cohort_id]
        # A teacher listed twice still fills only one half.
        unique_teacher_ids = list(dict.fromkeys(teacher_ids))
        placing = unique_teacher_ids[:2] if subject.is_split else unique_teacher_ids[:1]
        if any(teacher_id not in teachers for teacher_id in placing):
            logger.debug("Skipping %s: assigned teacher missing from the model", subject.id)
            unplaced.append(subject.id)
            continue

        days = list(WEEKDAYS)
        rng.shuffle(days)
        target: CellKey | None = None
        for weekday in days:
            slots = list(period_slots(cohort.time_of_day, cohort.is_block_schedule))
            rng.shuffle(slots)
            for slot_label in slots:
                base = CellKey(cohort.id, weekday, slot_label)
                if base in occupied_cells:
                    continue
                if any(
                    schedule_for(teacher_id).check_placement(teachers[teacher_id], cohort, weekday, slot_label).hard_failure
                    for teacher_id in placing
                ):
                    continue
                target = base
                break
            if target is not None:
                break

        if target is None:
            unplaced.append(subject.id)
            continue

        occupied_cells.add(target)
        for position, teacher_id in enumerate(placing):
            key = target.half(position) if subject.is_split else target
            lesson = PlacedLesson(
                id=key.to_id(),
                cohort_id=cohort.id,
                weekday=target.weekday,
                slot_label=target.slot_label,
                subject_id=subject.id,
                teacher_id=teacher_id,
            )
            schedule_for(teacher_id).add(lesson)
            added.append(lesson)

    logger.info(
        "Auto-fill placed %d lessons for %s cohorts, %d sessions left unplaced",
        len(added),
        "block-schedule" if block_schedule else "regular",
        len(unplaced),
    )
    return PopulateResult(
        lessons=lessons + added,
        added_count=len(added),
        unplaced_subject_ids=list(dict.fromkeys(unplaced)),
    )
