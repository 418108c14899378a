from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from horario.schemas.highlight import HighlightStatus
from horario.schemas.timetable import WEEKDAYS, Cohort, PlacedLesson, Teacher
from horario.services.time_slots import (
    MINUTES_PER_DAY,
    SlotSpan,
    accepts_slot,
    next_weekday,
    parse_slot,
    previous_weekday,
)

STANDARD_LESSON_WEIGHT = 1.0
BLOCK_LESSON_WEIGHT = 1.25
MAX_DAILY_LESSON_UNITS = 8
MIN_REST_MINUTES = 11 * 60


def lesson_weight(cohort: Cohort | None) -> float:
    if cohort is not None and cohort.is_block_schedule:
        return BLOCK_LESSON_WEIGHT
    return STANDARD_LESSON_WEIGHT


def rest_minutes(previous_day_end: int, next_day_start: int) -> int:
    return (MINUTES_PER_DAY - previous_day_end) + next_day_start


def is_rest_violation(previous_day_end: int, next_day_start: int) -> bool:
    return rest_minutes(previous_day_end, next_day_start) < MIN_REST_MINUTES


def exceeds_daily_load(units: float) -> bool:
    return units > MAX_DAILY_LESSON_UNITS


@dataclass
class DayBounds:
    min_start: int
    max_end: int

    def extend(self, span: SlotSpan) -> None:
        self.min_start = min(self.min_start, span.start)
        self.max_end = max(self.max_end, span.end)


@dataclass(frozen=True)
class PlacementVerdict:
    wrong_period: bool = False
    double_booked: bool = False
    overloaded: bool = False
    rest_violation: bool = False
    unavailable: bool = False

    @property
    def hard_failure(self) -> bool:
        return self.wrong_period or self.double_booked or self.overloaded or self.rest_violation

    @property
    def status(self) -> HighlightStatus | None:
        if self.hard_failure:
            return None
        return "warning" if self.unavailable else "valid"


class TeacherSchedule:
    """One teacher's placed lessons bucketed per weekday.

    Both the batch validator and the speculative highlight calculator read
    their load, rest and booking figures from here. ``ignore_lesson_id``
    drops a lesson that is being moved and therefore no longer occupies its
    cell.
    """

    def __init__(
        self,
        teacher_id: str,
        lessons: Iterable[PlacedLesson],
        cohorts: Mapping[str, Cohort],
        *,
        ignore_lesson_id: str | None = None,
    ) -> None:
        self.teacher_id = teacher_id
        self._cohorts = cohorts
        self.lessons_by_day: dict[str, list[PlacedLesson]] = defaultdict(list)
        self.booked: dict[str, set[str]] = defaultdict(set)
        self.units: dict[str, float] = defaultdict(float)
        self.bounds: dict[str, DayBounds] = {}
        for lesson in lessons:
            if lesson.teacher_id != teacher_id or lesson.id == ignore_lesson_id:
                continue
            self.add(lesson)

    def add(self, lesson: PlacedLesson) -> None:
        day = lesson.weekday
        span = parse_slot(lesson.slot_label)
        self.lessons_by_day[day].append(lesson)
        self.booked[day].add(lesson.slot_label)
        self.units[day] += lesson_weight(self._cohorts.get(lesson.cohort_id))
        if day in self.bounds:
            self.bounds[day].extend(span)
        else:
            self.bounds[day] = DayBounds(min_start=span.start, max_end=span.end)

    def rest_violations(self) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        for first, second in zip(WEEKDAYS, WEEKDAYS[1:]):
            first_bounds = self.bounds.get(first)
            second_bounds = self.bounds.get(second)
            if first_bounds is None or second_bounds is None:
                continue
            if is_rest_violation(first_bounds.max_end, second_bounds.min_start):
                pairs.append((first, second))
        return pairs

    def overloaded_days(self) -> list[str]:
        return [day for day in WEEKDAYS if day in self.units and exceeds_daily_load(self.units[day])]

    def check_placement(self, teacher: Teacher, cohort: Cohort, weekday: str, slot_label: str) -> PlacementVerdict:
        """Judge one hypothetical extra lesson in ``cohort`` against the current schedule."""
        if not accepts_slot(cohort, slot_label):
            return PlacementVerdict(wrong_period=True)
        weight = lesson_weight(cohort)
        if slot_label in self.booked.get(weekday, ()):
            return PlacementVerdict(double_booked=True)
        if exceeds_daily_load(self.units.get(weekday, 0.0) + weight):
            return PlacementVerdict(overloaded=True)

        span = parse_slot(slot_label)
        previous_day = previous_weekday(weekday)
        if previous_day is not None and previous_day in self.bounds:
            if is_rest_violation(self.bounds[previous_day].max_end, span.start):
                return PlacementVerdict(rest_violation=True)
        following_day = next_weekday(weekday)
        if following_day is not None and following_day in self.bounds:
            if is_rest_violation(span.end, self.bounds[following_day].min_start):
                return PlacementVerdict(rest_violation=True)

        return PlacementVerdict(unavailable=not teacher.is_available(weekday, slot_label))
