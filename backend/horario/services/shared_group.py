from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from horario.schemas.timetable import Assignment, PlacedLesson, Subject, TimetableState


@dataclass(frozen=True)
class SubjectResolution:
    final_subject_id: str
    is_swap: bool


class SubjectCatalog:
    """Subject lookups keyed for shared-group (BNCC) resolution."""

    def __init__(self, subjects: Iterable[Subject]) -> None:
        self._by_id: dict[str, Subject] = {}
        self._by_cohort_group: dict[tuple[str, str], Subject] = {}
        for subject in subjects:
            self._by_id[subject.id] = subject
            if subject.shared_group_id:
                # First match wins when a cohort carries duplicates.
                self._by_cohort_group.setdefault((subject.cohort_id, subject.shared_group_id), subject)

    @classmethod
    def from_state(cls, state: TimetableState) -> "SubjectCatalog":
        return cls(state.subjects)

    def get(self, subject_id: str) -> Subject | None:
        return self._by_id.get(subject_id)

    def shared_counterpart(self, shared_group_id: str, cohort_id: str) -> Subject | None:
        return self._by_cohort_group.get((cohort_id, shared_group_id))

    def resolve(self, lesson: PlacedLesson) -> SubjectResolution:
        original = self._by_id.get(lesson.subject_id)
        if original is None or original.cohort_id == lesson.cohort_id:
            return SubjectResolution(final_subject_id=lesson.subject_id, is_swap=False)

        if original.shared_group_id:
            target = self.shared_counterpart(original.shared_group_id, lesson.cohort_id)
            if target is not None:
                return SubjectResolution(final_subject_id=target.id, is_swap=True)

        return SubjectResolution(final_subject_id=lesson.subject_id, is_swap=True)


def resolve_subject(lesson: PlacedLesson, state: TimetableState) -> SubjectResolution:
    return SubjectCatalog.from_state(state).resolve(lesson)


def is_valid_shared_swap(
    lesson: PlacedLesson,
    resolution: SubjectResolution,
    assignments: Mapping[str, Assignment],
) -> bool:
    """A swap only counts as legitimate when the placed teacher also teaches the counterpart."""
    if not resolution.is_swap or resolution.final_subject_id == lesson.subject_id:
        return False
    assignment = assignments.get(resolution.final_subject_id)
    return assignment is not None and lesson.teacher_id in assignment.teacher_ids
