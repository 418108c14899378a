from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AlertKind(str, Enum):
    # Values are the wire names stored by existing editor clients.
    teacher_double_booking = "professor_conflito_horario"
    wrong_cohort = "turma_errada"
    rest_period = "intersticio"
    daily_overload = "max_aulas_dia"
    split_availability = "conflito_disponibilidade_divisao"
    outside_availability = "indisponivel"


HARD_ALERT_KINDS = frozenset({AlertKind.teacher_double_booking})

ALERT_LEGEND: dict[AlertKind, tuple[str, str]] = {
    AlertKind.teacher_double_booking: (
        "Teacher double-booking",
        "Critical: a teacher is placed in more than one cohort in the same slot.",
    ),
    AlertKind.wrong_cohort: (
        "Cross-cohort swap",
        "A subject was placed in another cohort and is not a valid shared-group swap.",
    ),
    AlertKind.rest_period: (
        "Rest period under 11h",
        "Less than 11 hours of rest between two consecutive working days.",
    ),
    AlertKind.daily_overload: (
        "Daily overload",
        "Teacher has more than 8 lesson units in a day.",
    ),
    AlertKind.split_availability: (
        "Split subject availability",
        "A teacher of a split subject is unavailable at the placed slot.",
    ),
    AlertKind.outside_availability: (
        "Outside availability",
        "Lesson placed in a slot the teacher marked as unavailable.",
    ),
}


class Alert(BaseModel):
    id: str
    kind: AlertKind
    severity: Literal["hard", "soft"]
    detail: str
    timestamp: int
    affected_lesson_ids: list[str] = Field(default_factory=list, alias="affectedLessonIds")

    model_config = ConfigDict(populate_by_name=True)


class AlertLegendEntry(BaseModel):
    kind: AlertKind
    name: str
    description: str


class AlertReport(BaseModel):
    alerts: list[Alert] = Field(default_factory=list)
    critical_count: int = Field(default=0, alias="criticalCount")
    counts_by_kind: dict[AlertKind, int] = Field(default_factory=dict, alias="countsByKind")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_alerts(cls, alerts: list[Alert]) -> "AlertReport":
        counts: dict[AlertKind, int] = {}
        for alert in alerts:
            counts[alert.kind] = counts.get(alert.kind, 0) + 1
        return cls(
            alerts=alerts,
            critical_count=sum(1 for alert in alerts if alert.kind in HARD_ALERT_KINDS),
            counts_by_kind=counts,
        )


def alert_legend() -> list[AlertLegendEntry]:
    return [
        AlertLegendEntry(kind=kind, name=name, description=description)
        for kind, (name, description) in ALERT_LEGEND.items()
    ]
