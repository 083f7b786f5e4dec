"""
Feedback API Router

Free-text product feedback with a 1-5 rating.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.clock import Clock, get_clock
from core.database import get_db
from core.exceptions import NotFoundError, ValidationError
from schemas import FeedbackCreate, FeedbackResponse
from services.sleep_repository import SleepRepository

router = APIRouter(prefix="/v1/feedback", tags=["Feedback"])


@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
def submit_feedback(
    payload: FeedbackCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    message = payload.message.strip()
    if not message:
        raise ValidationError("Message must not be blank", field="message")
    repository = SleepRepository(db)
    if repository.get_user(payload.user_id) is None:
        raise NotFoundError("User not found")
    return repository.create_feedback(payload.user_id, message, payload.rating, clock.now())
