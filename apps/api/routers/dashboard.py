"""
Dashboard API Router

Score, streak, sleep debt, missions and the 7-day trend, all computed from
the user's most recent check-ins.
"""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.clock import Clock, get_clock
from core.database import get_db
from core.exceptions import NotFoundError
from schemas import DashboardResponse
from services.dashboard import build_dashboard
from services.sleep_repository import SleepRepository
from services.sleep_trend import TREND_POINTS

router = APIRouter(prefix="/v1/dashboard", tags=["Dashboard"])


@router.get("/{user_id}", response_model=DashboardResponse)
def get_dashboard(
    user_id: UUID,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    repository = SleepRepository(db)
    if repository.get_user(user_id) is None:
        raise NotFoundError("User not found")

    checkins = repository.list_checkins(user_id, TREND_POINTS)
    profile = repository.get_profile(user_id)
    return build_dashboard(checkins, profile, clock.today())
