"""
Sleep Check-in API Router

One check-in per user per day; submitting the same date again overwrites it.
The response carries a short coaching note when the text generator is
available. That note is best-effort and never fails the submission.
"""
import logging
from datetime import timedelta
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.clock import Clock, get_clock
from core.config import settings
from core.database import get_db
from core.exceptions import NotFoundError
from schemas import CheckinCreate, CheckinResponse, CheckinSubmitResponse, WeeklyStatsResponse
from services.daily_feedback import generate_daily_feedback
from services.sleep_repository import SleepRepository
from services.text_generation import TextGenerator, get_text_generator
from services.weekly_stats import compute_weekly_stats, window_bounds

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/checkins", tags=["Sleep Check-ins"])


@router.post("", response_model=CheckinSubmitResponse, status_code=status.HTTP_201_CREATED)
def submit_checkin(
    payload: CheckinCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    generator: Optional[TextGenerator] = Depends(get_text_generator),
):
    repository = SleepRepository(db)
    if repository.get_user(payload.user_id) is None:
        raise NotFoundError("User not found")

    checkin = repository.upsert_checkin(
        payload.user_id,
        payload.checkin_date,
        payload.bedtime,
        payload.wakeup_time,
        payload.sleep_quality,
        payload.mood,
        notes=payload.notes,
        phone_before_bed=payload.phone_before_bed,
        now=clock.now(),
    )
    logger.info(f"Check-in saved for {payload.user_id} on {payload.checkin_date}")

    feedback = generate_daily_feedback(generator, checkin, repository.get_profile(payload.user_id))

    return CheckinSubmitResponse(
        **CheckinResponse.model_validate(checkin).model_dump(),
        daily_feedback=feedback,
    )


@router.get("/{user_id}", response_model=List[CheckinResponse])
def list_checkins(
    user_id: UUID,
    limit: int = Query(default=settings.DEFAULT_CHECKIN_LIMIT, ge=1, le=366),
    db: Session = Depends(get_db),
):
    """Most recent check-ins, newest first."""
    return SleepRepository(db).list_checkins(user_id, limit)


@router.get("/{user_id}/summary", response_model=WeeklyStatsResponse)
def get_weekly_summary(
    user_id: UUID,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Stats over the trailing 7-day window."""
    bounds = window_bounds(clock.today())
    checkins = SleepRepository(db).list_checkins_in_window(
        user_id, bounds["current_start"], bounds["current_end"] + timedelta(days=1)
    )
    return compute_weekly_stats(checkins).to_dict()
