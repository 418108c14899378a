from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator, model_validator

Weekday = Literal["segunda", "terca", "quarta", "quinta", "sexta"]
Period = Literal["manha", "tarde", "noite"]

# Order matters: rest periods are only measured between neighbours.
WEEKDAYS: tuple[str, ...] = ("segunda", "terca", "quarta", "quinta", "sexta")

SLOT_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d-([01]\d|2[0-3]):[0-5]\d$")
SUB_SLOT_SUFFIXES = {"-0": 0, "-1": 1}

_LAX_BOOL = TypeAdapter(bool)
_LAX_INT = TypeAdapter(int)


@dataclass(frozen=True)
class CellKey:
    """Structured form of a grid cell id.

    The external string form is ``{cohort}_{weekday}_{slot}`` for a full cell
    and ``{cohort}_{weekday}_{slot}-0`` / ``-1`` for the two halves of a split
    cell.
    """

    cohort_id: str
    weekday: str
    slot_label: str
    sub_slot: int | None = None

    @property
    def base(self) -> "CellKey":
        if self.sub_slot is None:
            return self
        return CellKey(self.cohort_id, self.weekday, self.slot_label)

    def half(self, sub_slot: int) -> "CellKey":
        return CellKey(self.cohort_id, self.weekday, self.slot_label, sub_slot)

    def to_id(self) -> str:
        base_id = f"{self.cohort_id}_{self.weekday}_{self.slot_label}"
        if self.sub_slot is None:
            return base_id
        return f"{base_id}-{self.sub_slot}"

    @classmethod
    def parse(cls, value: str) -> "CellKey":
        cohort_id, weekday, rest = value.rsplit("_", 2)
        sub_slot = None
        # "07:10-08:00" carries one dash, a half cell adds a second one.
        if rest.count("-") == 2:
            rest, _, suffix = rest.rpartition("-")
            sub_slot = int(suffix)
        return cls(cohort_id, weekday, rest, sub_slot)


class DomainModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Course(DomainModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=100)


class Cohort(DomainModel):
    id: str = Field(min_length=1)
    course_id: str = Field(alias="courseId", min_length=1)
    name: str = Field(min_length=1, max_length=50)
    time_of_day: Period = Field(alias="timeOfDay")
    is_block_schedule: bool = Field(default=False, alias="isBlockSchedule")


class Subject(DomainModel):
    id: str = Field(min_length=1)
    cohort_id: str = Field(alias="cohortId", min_length=1)
    name: str = Field(min_length=1, max_length=100)
    weekly_lesson_count: float = Field(alias="weeklyLessonCount", ge=0, le=40)
    is_split: bool = Field(default=False, alias="isSplit")
    split_teacher_count: int = Field(default=1, alias="splitTeacherCount", ge=1, le=5)
    shared_group_id: str | None = Field(default=None, alias="sharedGroupId")

    @model_validator(mode="before")
    @classmethod
    def normalize_split(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        split_key = "isSplit" if "isSplit" in data else "is_split"
        count_key = "splitTeacherCount" if "splitTeacherCount" in data else "split_teacher_count"
        try:
            is_split = _LAX_BOOL.validate_python(data.get(split_key, False))
            raw_count = data.get(count_key)
            count = _LAX_INT.validate_python(raw_count) if raw_count is not None else None
        except ValidationError:
            # Field validation reports the malformed value.
            return data
        data.pop("is_split", None)
        data.pop("split_teacher_count", None)
        if not is_split:
            count = 1
        elif count is None:
            count = 2
        elif count < 2:
            raise ValueError("Split subjects need at least two teachers")
        data["isSplit"] = is_split
        data["splitTeacherCount"] = count
        # Blank group ids come from cleared form fields.
        if not data.get("sharedGroupId", data.get("shared_group_id")):
            data.pop("shared_group_id", None)
            data["sharedGroupId"] = None
        return data


class Teacher(DomainModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    availability: dict[Weekday, frozenset[str]] = Field(default_factory=dict)

    @field_validator("availability", mode="before")
    @classmethod
    def sanitize_availability(cls, value: Any) -> dict[str, frozenset[str]]:
        if not isinstance(value, dict):
            return {}
        clean: dict[str, frozenset[str]] = {}
        for day, slots in value.items():
            if day not in WEEKDAYS:
                continue
            if isinstance(slots, str):
                clean[day] = frozenset([slots])
            elif isinstance(slots, (list, tuple, set, frozenset)):
                clean[day] = frozenset(str(slot) for slot in slots)
            else:
                clean[day] = frozenset()
        return clean

    def is_available(self, weekday: str, slot_label: str) -> bool:
        return slot_label in self.availability.get(weekday, ())


class Assignment(DomainModel):
    subject_id: str = Field(alias="subjectId", min_length=1)
    # Order only decides which half of a split cell a teacher is shown in.
    teacher_ids: tuple[str, ...] = Field(default=(), alias="teacherIds")


class PlacedLesson(DomainModel):
    id: str = Field(min_length=1)
    cohort_id: str = Field(alias="cohortId", min_length=1)
    weekday: Weekday
    slot_label: str = Field(alias="slotLabel")
    subject_id: str = Field(alias="subjectId", min_length=1)
    teacher_id: str = Field(alias="teacherId", min_length=1)

    @field_validator("slot_label")
    @classmethod
    def validate_slot_label(cls, value: str) -> str:
        if not SLOT_PATTERN.match(value):
            raise ValueError("Slot label must look like HH:MM-HH:MM")
        return value

    @property
    def cell_key(self) -> CellKey:
        key = CellKey(self.cohort_id, self.weekday, self.slot_label)
        suffix = self.id[len(key.to_id()):]
        return key.half(SUB_SLOT_SUFFIXES[suffix]) if suffix in SUB_SLOT_SUFFIXES else key


class SharedGroup(DomainModel):
    id: str = Field(min_length=1)
    name: str


class TimetableState(DomainModel):
    version: str = "1"
    year: int | None = None
    courses: list[Course] = Field(default_factory=list)
    cohorts: list[Cohort] = Field(default_factory=list)
    subjects: list[Subject] = Field(default_factory=list)
    teachers: list[Teacher] = Field(default_factory=list)
    assignments: list[Assignment] = Field(default_factory=list)
    lessons: list[PlacedLesson] = Field(default_factory=list)
    shared_groups: list[SharedGroup] = Field(default_factory=list, alias="sharedGroups")

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "TimetableState":
        # Dangling references are tolerated downstream; duplicate keys are not.
        def ensure_unique(label: str, ids: list[str]) -> None:
            seen: set[str] = set()
            duplicates: set[str] = set()
            for item_id in ids:
                if item_id in seen:
                    duplicates.add(item_id)
                else:
                    seen.add(item_id)
            if duplicates:
                raise ValueError(f"Duplicate {label} id(s): {', '.join(sorted(duplicates))}")

        ensure_unique("course", [course.id for course in self.courses])
        ensure_unique("cohort", [cohort.id for cohort in self.cohorts])
        ensure_unique("subject", [subject.id for subject in self.subjects])
        ensure_unique("teacher", [teacher.id for teacher in self.teachers])
        ensure_unique("assignment subject", [assignment.subject_id for assignment in self.assignments])
        ensure_unique("lesson", [lesson.id for lesson in self.lessons])
        return self
