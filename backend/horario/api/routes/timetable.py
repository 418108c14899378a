from fastapi import APIRouter

from horario.core.config import get_settings
from horario.core.exceptions import ResourceNotFoundError
from horario.schemas.alert import AlertLegendEntry, AlertReport, alert_legend
from horario.schemas.highlight import HighlightRequest, HighlightResponse
from horario.schemas.insights import (
    AllocatedUnitsEntry,
    DashboardInsights,
    InsightsRequest,
    PopulateRequest,
    PopulateResult,
    TeacherTimetable,
)
from horario.schemas.timetable import TimetableState
from horario.services.autofill import populate_grid
from horario.services.highlights import compute_highlights
from horario.services.insights import allocated_units, compute_insights, teacher_timetable
from horario.services.validation import validate

router = APIRouter()


@router.post("/validate", response_model=AlertReport)
def validate_timetable(state: TimetableState):
    return AlertReport.from_alerts(validate(state))


@router.get("/alerts/legend", response_model=list[AlertLegendEntry])
def get_alert_legend():
    return alert_legend()


@router.post("/highlights", response_model=HighlightResponse)
def get_highlights(request: HighlightRequest):
    highlights = compute_highlights(
        request.state,
        request.source,
        visible_cohort_ids=request.visible_cohort_ids,
        visible_periods=request.visible_periods,
    )
    return HighlightResponse(highlights=highlights)


@router.post("/insights", response_model=DashboardInsights)
def get_insights(request: InsightsRequest):
    alerts = validate(request.state)
    return compute_insights(request.state, alerts, block_schedule=request.block_schedule)


@router.post("/allocated-units", response_model=list[AllocatedUnitsEntry])
def get_allocated_units(state: TimetableState):
    return allocated_units(state)


@router.post("/teachers/{teacher_id}/schedule", response_model=TeacherTimetable)
def get_teacher_schedule(teacher_id: str, state: TimetableState):
    timetable = teacher_timetable(state, teacher_id)
    if timetable is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    return timetable


@router.post("/populate", response_model=PopulateResult)
def populate(request: PopulateRequest):
    seed = request.seed if request.seed is not None else get_settings().populate_random_seed
    return populate_grid(request.state, request.block_schedule, seed=seed)
