"""
Sleep Profile API Router

Onboarding answers: bedtime/wake-up goals and sleep challenges. Submitting
again creates a new profile that replaces the old one.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.clock import Clock, get_clock
from core.database import get_db
from core.exceptions import NotFoundError
from schemas import SleepProfileCreate, SleepProfileResponse
from services.sleep_repository import SleepRepository

router = APIRouter(prefix="/v1/sleep-profiles", tags=["Sleep Profiles"])


@router.post("", response_model=SleepProfileResponse, status_code=status.HTTP_201_CREATED)
def create_sleep_profile(
    payload: SleepProfileCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    repository = SleepRepository(db)
    if repository.get_user(payload.user_id) is None:
        raise NotFoundError("User not found")

    # Keep the first occurrence of each tag, in the order given
    challenges = list(dict.fromkeys(c.value for c in payload.sleep_challenges))
    return repository.create_profile(
        payload.user_id, payload.bedtime_goal, payload.wakeup_goal, challenges, clock.now()
    )


@router.get("/{user_id}", response_model=SleepProfileResponse)
def get_sleep_profile(user_id: UUID, db: Session = Depends(get_db)):
    profile = SleepRepository(db).get_profile(user_id)
    if profile is None:
        raise NotFoundError("Sleep profile not found")
    return profile
