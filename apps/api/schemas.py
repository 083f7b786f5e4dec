from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, date
from enum import Enum
from uuid import UUID
from typing import Any, Dict, Optional, List

from services.sleep_time import TIME_PATTERN

HHMM = TIME_PATTERN.pattern


class SleepChallenge(str, Enum):
    PHONE = "phone"
    STRESS = "stress"
    CAFFEINE = "caffeine"
    IRREGULAR = "irregular"
    NOISE = "noise"
    NAPS = "naps"


# --- Users ---

class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$", max_length=255)
    age: Optional[int] = Field(default=None, ge=1, le=130)


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: str
    age: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# --- Sleep profiles ---

class SleepProfileCreate(BaseModel):
    user_id: UUID
    bedtime_goal: str = Field(pattern=HHMM, description="HH:MM, 24-hour")
    wakeup_goal: str = Field(pattern=HHMM, description="HH:MM, 24-hour")
    sleep_challenges: List[SleepChallenge] = Field(default_factory=list)


class SleepProfileResponse(BaseModel):
    id: UUID
    user_id: UUID
    bedtime_goal: Optional[str] = None
    wakeup_goal: Optional[str] = None
    sleep_challenges: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("sleep_challenges", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


# --- Check-ins ---

class CheckinCreate(BaseModel):
    user_id: UUID
    checkin_date: date
    bedtime: str = Field(pattern=HHMM, description="HH:MM, 24-hour")
    wakeup_time: str = Field(pattern=HHMM, description="HH:MM, 24-hour")
    sleep_quality: int = Field(ge=1, le=5, strict=True)
    mood: int = Field(ge=1, le=5, strict=True)
    notes: Optional[str] = Field(default=None, max_length=500)
    phone_before_bed: bool = False


class CheckinResponse(BaseModel):
    id: UUID
    user_id: UUID
    checkin_date: date
    bedtime: str
    wakeup_time: str
    sleep_quality: int
    mood: int
    notes: Optional[str] = None
    phone_before_bed: bool
    sleep_hours: Optional[float] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CheckinSubmitResponse(CheckinResponse):
    daily_feedback: str = ""


class WeeklyStatsResponse(BaseModel):
    total_checkins: int
    avg_quality: Optional[float] = None
    avg_mood: Optional[float] = None
    avg_sleep_hours: Optional[float] = None
    earliest_bedtime: Optional[str] = None
    latest_bedtime: Optional[str] = None
    earliest_wakeup: Optional[str] = None
    latest_wakeup: Optional[str] = None
    phone_nights: int = 0
    avg_quality_phone: Optional[float] = None
    avg_quality_no_phone: Optional[float] = None


# --- Dashboard ---

class MissionResponse(BaseModel):
    id: str
    text: str
    icon: str


class TrendPointResponse(BaseModel):
    day: str
    date: str
    quality: int
    score: int


class DashboardResponse(BaseModel):
    sleep_score: int
    weekly_score: int
    streak: int
    streak_message: str
    sleep_debt: float
    missions: List[MissionResponse]
    trend: List[TrendPointResponse]
    checkin_count: int


# --- Weekly reports ---

class StructuredReportResponse(BaseModel):
    sleep_score: int
    sleep_score_label: str
    key_wins: List[str] = Field(default_factory=list)
    pattern_insights: List[str] = Field(default_factory=list)
    focus_recommendation: str = ""
    coach_note: str = ""


class SavedReportResponse(BaseModel):
    report: StructuredReportResponse
    stats: Dict[str, Any]
    weekStart: date
    weekEnd: date
    generatedAt: datetime


class WeeklyReportResponse(SavedReportResponse):
    isPartial: bool
    cached: bool


# --- Feedback ---

class FeedbackCreate(BaseModel):
    user_id: UUID
    message: str = Field(min_length=1, max_length=1000)
    rating: int = Field(ge=1, le=5, strict=True)


class FeedbackResponse(BaseModel):
    id: UUID
    user_id: UUID
    message: str
    rating: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
