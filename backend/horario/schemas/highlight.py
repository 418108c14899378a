from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from horario.schemas.timetable import Period, TimetableState

HighlightStatus = Literal["valid", "warning"]


class DragSource(BaseModel):
    """What the user is dragging or has selected.

    Either a sidebar item (``subjectId`` + ``teacherId``) about to be dropped,
    or an existing lesson (``lessonId``) being moved; the moved lesson's own
    cell is treated as vacated.
    """

    subject_id: str | None = Field(default=None, alias="subjectId")
    teacher_id: str | None = Field(default=None, alias="teacherId")
    lesson_id: str | None = Field(default=None, alias="lessonId")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @model_validator(mode="after")
    def validate_shape(self) -> "DragSource":
        if self.lesson_id is None and (self.subject_id is None or self.teacher_id is None):
            raise ValueError("Drag source needs a lessonId or both subjectId and teacherId")
        return self


class HighlightRequest(BaseModel):
    state: TimetableState
    source: DragSource
    visible_cohort_ids: list[str] | None = Field(default=None, alias="visibleCohortIds")
    visible_periods: list[Period] | None = Field(default=None, alias="visiblePeriods")

    model_config = ConfigDict(populate_by_name=True)


class HighlightResponse(BaseModel):
    highlights: dict[str, HighlightStatus] = Field(default_factory=dict)
