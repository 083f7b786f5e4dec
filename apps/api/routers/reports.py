"""
Weekly Report API Router

GET /weekly serves the newest report while it is fresh and generates a new
one otherwise (or whenever regenerate=true). GET /by-date returns the saved
report covering a given check-in date.
"""
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.clock import Clock, get_clock
from core.database import get_db
from schemas import SavedReportResponse, WeeklyReportResponse
from services.sleep_repository import SleepRepository
from services.text_generation import TextGenerator, get_text_generator
from services.weekly_report import WeeklyReportService

router = APIRouter(prefix="/v1/reports", tags=["Weekly Reports"])


def get_report_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    generator: Optional[TextGenerator] = Depends(get_text_generator),
) -> WeeklyReportService:
    return WeeklyReportService(SleepRepository(db), generator, clock)


@router.get("/{user_id}/weekly", response_model=WeeklyReportResponse)
def get_weekly_report(
    user_id: UUID,
    regenerate: bool = False,
    service: WeeklyReportService = Depends(get_report_service),
):
    return service.weekly_report(user_id, regenerate=regenerate).to_response()


@router.get("/{user_id}/by-date", response_model=SavedReportResponse)
def get_report_by_date(
    user_id: UUID,
    day: date = Query(alias="date"),
    service: WeeklyReportService = Depends(get_report_service),
):
    return service.report_for_date(user_id, day).to_response()
