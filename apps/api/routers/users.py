"""
Users API Router

Registration is keyed by email: registering an existing email returns the
same user with the new name/age. There is no authentication; clients keep
the returned id.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.clock import Clock, get_clock
from core.database import get_db
from core.exceptions import NotFoundError, ValidationError
from schemas import UserCreate, UserResponse
from services.sleep_repository import SleepRepository

router = APIRouter(prefix="/v1/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    name = payload.name.strip()
    if not name:
        raise ValidationError("Name must not be blank", field="name")
    user = SleepRepository(db).upsert_user(
        name, payload.email.lower().strip(), payload.age, clock.now()
    )
    return user


@router.get("/{email}", response_model=UserResponse)
def get_user_by_email(email: str, db: Session = Depends(get_db)):
    user = SleepRepository(db).get_user_by_email(email.lower().strip())
    if user is None:
        raise NotFoundError("User not found")
    return user
