from __future__ import annotations

from dataclasses import dataclass

from horario.schemas.timetable import WEEKDAYS, Cohort, Period

MORNING_SLOTS: tuple[str, ...] = (
    "07:10-08:00", "08:00-08:50", "08:50-09:40", "10:00-10:50", "10:50-11:40", "11:40-12:30",
)
AFTERNOON_SLOTS: tuple[str, ...] = (
    "13:30-14:20", "14:20-15:10", "15:10-16:00", "16:20-17:10", "17:10-18:00", "18:00-18:50",
)
EVENING_SLOTS_REGULAR: tuple[str, ...] = (
    "18:10-19:00", "19:00-19:50", "19:50-20:50", "21:05-21:55", "21:55-23:00",
)
EVENING_SLOTS_BLOCK: tuple[str, ...] = EVENING_SLOTS_REGULAR

# Block-schedule cohorts never teach in the first evening slot.
BLOCK_DISABLED_SLOTS = frozenset({"18:10-19:00"})

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class SlotSpan:
    start: int
    end: int


def parse_slot(label: str) -> SlotSpan:
    start_text, end_text = label.split("-")
    start_hours, start_minutes = start_text.split(":")
    end_hours, end_minutes = end_text.split(":")
    return SlotSpan(
        start=int(start_hours) * 60 + int(start_minutes),
        end=int(end_hours) * 60 + int(end_minutes),
    )


def period_of_slot(label: str) -> Period:
    if label in MORNING_SLOTS:
        return "manha"
    if label in AFTERNOON_SLOTS:
        return "tarde"
    return "noite"


def grid_slots(block_schedule: bool) -> tuple[str, ...]:
    evening = EVENING_SLOTS_BLOCK if block_schedule else EVENING_SLOTS_REGULAR
    return MORNING_SLOTS + AFTERNOON_SLOTS + evening


def period_slots(period: Period, block_schedule: bool) -> tuple[str, ...]:
    if period == "manha":
        return MORNING_SLOTS
    if period == "tarde":
        return AFTERNOON_SLOTS
    return EVENING_SLOTS_BLOCK if block_schedule else EVENING_SLOTS_REGULAR


def is_disabled_slot(cohort: Cohort, label: str) -> bool:
    return cohort.is_block_schedule and label in BLOCK_DISABLED_SLOTS


def accepts_slot(cohort: Cohort, label: str) -> bool:
    """Whether a cohort's own period and curriculum allow teaching at ``label``."""
    return period_of_slot(label) == cohort.time_of_day and not is_disabled_slot(cohort, label)


def previous_weekday(weekday: str) -> str | None:
    index = WEEKDAYS.index(weekday)
    return WEEKDAYS[index - 1] if index > 0 else None


def next_weekday(weekday: str) -> str | None:
    index = WEEKDAYS.index(weekday)
    return WEEKDAYS[index + 1] if index + 1 < len(WEEKDAYS) else None
