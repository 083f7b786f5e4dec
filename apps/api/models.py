from sqlalchemy import Column, Integer, Boolean, CheckConstraint, Date, DateTime, ForeignKey, Numeric, Text, String, Index, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import uuid

# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    age = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profiles = relationship("SleepProfile", back_populates="user", cascade="all, delete-orphan")


class SleepProfile(Base):
    """
    Onboarding answers. A user may onboard more than once; the newest row
    (by created_at) is the active profile.
    """
    __tablename__ = "sleep_profile"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bedtime_goal = Column(String(5), nullable=True)  # "HH:MM"
    wakeup_goal = Column(String(5), nullable=True)  # "HH:MM"
    # Tags from: phone, stress, caffeine, irregular, noise, naps (order preserved)
    sleep_challenges = Column(JSONType, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="profiles")


class SleepCheckin(Base):
    __tablename__ = "sleep_checkin"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    checkin_date = Column(Date, nullable=False)
    bedtime = Column(String(5), nullable=False)  # "HH:MM"
    wakeup_time = Column(String(5), nullable=False)  # "HH:MM"
    sleep_quality = Column(Integer, nullable=False)  # 1=poor, 5=great
    mood = Column(Integer, nullable=False)  # 1=low, 5=great
    phone_before_bed = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    # Derived at write time from bedtime/wakeup_time (crosses midnight when wake <= bed)
    sleep_hours = Column(Numeric(4, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("uq_sleep_checkin_user_date", "user_id", "checkin_date", unique=True),
        CheckConstraint("sleep_quality BETWEEN 1 AND 5", name="ck_sleep_checkin_quality"),
        CheckConstraint("mood BETWEEN 1 AND 5", name="ck_sleep_checkin_mood"),
    )


class WeeklyReport(Base):
    """
    One generated weekly report. Rows are never updated; a regeneration
    inserts a new row and the newest by created_at is current.
    """
    __tablename__ = "weekly_report"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    report_text = Column(Text, nullable=False)  # JSON-encoded structured report
    stats = Column(JSONType, nullable=False)  # WeeklyStats snapshot used to generate it
    week_start = Column(Date, nullable=False)
    week_end = Column(Date, nullable=False)
    # NULL on rows written before the schema tag existed (legacy plain text)
    schema_version = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_weekly_report_user_created", "user_id", "created_at"),
    )


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_feedback_rating"),
    )
