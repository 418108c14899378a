from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Collection
from dataclasses import dataclass

from horario.schemas.highlight import DragSource, HighlightStatus
from horario.schemas.timetable import WEEKDAYS, CellKey, Cohort, PlacedLesson, TimetableState
from horario.services.feasibility import TeacherSchedule
from horario.services.time_slots import grid_slots, period_of_slot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSource:
    teacher_id: str
    subject_id: str
    ignore_lesson_id: str | None


def resolve_source(state: TimetableState, source: DragSource) -> ResolvedSource | None:
    if source.lesson_id is None:
        return ResolvedSource(source.teacher_id, source.subject_id, None)
    lesson = next((item for item in state.lessons if item.id == source.lesson_id), None)
    if lesson is None:
        return None
    return ResolvedSource(lesson.teacher_id, lesson.subject_id, lesson.id)


def target_cohorts(state: TimetableState, subject_id: str, teacher_id: str) -> list[Cohort]:
    """Cohorts the dragged subject may land in.

    A shared-group subject may go to any cohort whose same-group subject the
    teacher is assigned to; anything else stays in its own cohort.
    """
    subjects = {subject.id: subject for subject in state.subjects}
    source_subject = subjects[subject_id]
    if source_subject.shared_group_id:
        assigned_subject_ids = {
            assignment.subject_id for assignment in state.assignments if teacher_id in assignment.teacher_ids
        }
        cohort_ids = {
            subject.cohort_id
            for subject in state.subjects
            if subject.shared_group_id == source_subject.shared_group_id and subject.id in assigned_subject_ids
        }
    else:
        cohort_ids = {source_subject.cohort_id}
    return [cohort for cohort in state.cohorts if cohort.id in cohort_ids]


def free_destinations(base: CellKey, occupants: list[PlacedLesson], is_split: bool) -> list[CellKey]:
    if not is_split:
        return [] if occupants else [base]
    taken = {lesson.cell_key.sub_slot for lesson in occupants}
    if None in taken:
        return []
    return [base.half(sub_slot) for sub_slot in (0, 1) if sub_slot not in taken]


def compute_highlights(
    state: TimetableState,
    source: DragSource,
    *,
    visible_cohort_ids: Collection[str] | None = None,
    visible_periods: Collection[str] | None = None,
) -> dict[str, HighlightStatus]:
    """Mark every empty cell that would accept the dragged item.

    Cells failing a hard check (wrong period, disabled slot, double-booking,
    overload, rest) are left out; an availability miss alone yields
    ``"warning"``.
    """
    resolved = resolve_source(state, source)
    if resolved is None:
        logger.debug("Drag source lesson %s is not in the grid", source.lesson_id)
        return {}
    teacher = next((item for item in state.teachers if item.id == resolved.teacher_id), None)
    subject = next((item for item in state.subjects if item.id == resolved.subject_id), None)
    if teacher is None or subject is None:
        return {}

    cohorts_by_id = {cohort.id: cohort for cohort in state.cohorts}
    schedule = TeacherSchedule(
        teacher.id,
        state.lessons,
        cohorts_by_id,
        ignore_lesson_id=resolved.ignore_lesson_id,
    )
    occupancy: dict[CellKey, list[PlacedLesson]] = defaultdict(list)
    for lesson in state.lessons:
        if lesson.id != resolved.ignore_lesson_id:
            occupancy[lesson.cell_key.base].append(lesson)

    highlights: dict[str, HighlightStatus] = {}
    for cohort in target_cohorts(state, subject.id, teacher.id):
        if visible_cohort_ids is not None and cohort.id not in visible_cohort_ids:
            continue
        for weekday in WEEKDAYS:
            for slot_label in grid_slots(cohort.is_block_schedule):
                if visible_periods is not None and period_of_slot(slot_label) not in visible_periods:
                    continue
                base = CellKey(cohort.id, weekday, slot_label)
                destinations = free_destinations(base, occupancy.get(base, []), subject.is_split)
                if not destinations:
                    continue
                status = schedule.check_placement(teacher, cohort, weekday, slot_label).status
                if status is None:
                    continue
                for destination in destinations:
                    highlights[destination.to_id()] = status
    return highlights
