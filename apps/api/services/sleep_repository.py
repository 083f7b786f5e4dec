"""
Sleep data access.

Every query the scoring and report code needs, behind one object bound to a
request's Session. Writes flush but do not commit; get_db() commits at the
end of the request.
"""
import logging
from datetime import date, datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Feedback, SleepCheckin, SleepProfile, User, WeeklyReport
from services.sleep_time import hours_of_sleep

logger = logging.getLogger(__name__)

CHECKIN_FIELDS = ("bedtime", "wakeup_time", "sleep_quality", "mood", "notes", "phone_before_bed")


class SleepRepository:
    def __init__(self, db: Session):
        self.db = db

    # ---------------------------------------------------------------- users

    def get_user(self, user_id: UUID) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def upsert_user(self, name: str, email: str, age: Optional[int], now: datetime) -> User:
        """Register by email; an existing email keeps its id and takes the new name/age."""
        user = self.get_user_by_email(email)
        if user is None:
            user = User(name=name, email=email, age=age, created_at=now)
            self.db.add(user)
        else:
            user.name = name
            user.age = age
        self.db.flush()
        return user

    # ------------------------------------------------------------- profiles

    def get_profile(self, user_id: UUID) -> Optional[SleepProfile]:
        return (
            self.db.query(SleepProfile)
            .filter(SleepProfile.user_id == user_id)
            .order_by(SleepProfile.created_at.desc())
            .first()
        )

    def create_profile(
        self,
        user_id: UUID,
        bedtime_goal: str,
        wakeup_goal: str,
        sleep_challenges: Sequence[str],
        now: datetime,
    ) -> SleepProfile:
        profile = SleepProfile(
            user_id=user_id,
            bedtime_goal=bedtime_goal,
            wakeup_goal=wakeup_goal,
            sleep_challenges=list(sleep_challenges),
            created_at=now,
        )
        self.db.add(profile)
        self.db.flush()
        return profile

    # ------------------------------------------------------------- checkins

    def upsert_checkin(
        self,
        user_id: UUID,
        checkin_date: date,
        bedtime: str,
        wakeup_time: str,
        sleep_quality: int,
        mood: int,
        notes: Optional[str] = None,
        phone_before_bed: bool = False,
        now: Optional[datetime] = None,
    ) -> SleepCheckin:
        """
        Create the day's check-in or overwrite it (last write wins).

        sleep_hours is derived here so stored rows always agree with
        hours_of_sleep().
        """
        values = {
            "bedtime": bedtime,
            "wakeup_time": wakeup_time,
            "sleep_quality": sleep_quality,
            "mood": mood,
            "notes": notes or None,
            "phone_before_bed": bool(phone_before_bed),
            "sleep_hours": round(hours_of_sleep(bedtime, wakeup_time), 2),
        }

        existing = self._get_checkin(user_id, checkin_date)
        if existing is not None:
            return self._apply(existing, values)

        checkin = SleepCheckin(user_id=user_id, checkin_date=checkin_date, **values)
        if now is not None:
            checkin.created_at = now
        try:
            with self.db.begin_nested():
                self.db.add(checkin)
                self.db.flush()
        except IntegrityError:
            # A concurrent request inserted the same day first; overwrite it.
            logger.info(f"Check-in insert raced for user {user_id} on {checkin_date}; updating instead")
            existing = self._get_checkin(user_id, checkin_date)
            if existing is None:
                raise
            return self._apply(existing, values)
        return checkin

    def _get_checkin(self, user_id: UUID, checkin_date: date) -> Optional[SleepCheckin]:
        return (
            self.db.query(SleepCheckin)
            .filter(SleepCheckin.user_id == user_id, SleepCheckin.checkin_date == checkin_date)
            .first()
        )

    def _apply(self, checkin: SleepCheckin, values: dict) -> SleepCheckin:
        for field, value in values.items():
            setattr(checkin, field, value)
        self.db.flush()
        return checkin

    def list_checkins(self, user_id: UUID, limit: int = 7) -> List[SleepCheckin]:
        """Most recent first."""
        return (
            self.db.query(SleepCheckin)
            .filter(SleepCheckin.user_id == user_id)
            .order_by(SleepCheckin.checkin_date.desc())
            .limit(limit)
            .all()
        )

    def list_checkins_in_window(self, user_id: UUID, start: date, end: Optional[date] = None) -> List[SleepCheckin]:
        """Check-ins with start <= date < end (no upper bound when end is None), most recent first."""
        query = self.db.query(SleepCheckin).filter(
            SleepCheckin.user_id == user_id,
            SleepCheckin.checkin_date >= start,
        )
        if end is not None:
            query = query.filter(SleepCheckin.checkin_date < end)
        return query.order_by(SleepCheckin.checkin_date.desc()).all()

    def count_checkins(self, user_id: UUID) -> int:
        return (
            self.db.query(func.count(SleepCheckin.id))
            .filter(SleepCheckin.user_id == user_id)
            .scalar()
        ) or 0

    # -------------------------------------------------------------- reports

    def get_latest_report(self, user_id: UUID) -> Optional[WeeklyReport]:
        return (
            self.db.query(WeeklyReport)
            .filter(WeeklyReport.user_id == user_id)
            .order_by(WeeklyReport.created_at.desc())
            .first()
        )

    def get_report_for_date(self, user_id: UUID, day: date) -> Optional[WeeklyReport]:
        """Newest report whose [week_start, week_end] covers the day."""
        return (
            self.db.query(WeeklyReport)
            .filter(
                WeeklyReport.user_id == user_id,
                WeeklyReport.week_start <= day,
                WeeklyReport.week_end >= day,
            )
            .order_by(WeeklyReport.created_at.desc())
            .first()
        )

    def save_report(
        self,
        user_id: UUID,
        report_text: str,
        stats: dict,
        week_start: date,
        week_end: date,
        schema_version: int,
        now: datetime,
    ) -> WeeklyReport:
        report = WeeklyReport(
            user_id=user_id,
            report_text=report_text,
            stats=stats,
            week_start=week_start,
            week_end=week_end,
            schema_version=schema_version,
            created_at=now,
        )
        self.db.add(report)
        self.db.flush()
        return report

    # ------------------------------------------------------------- feedback

    def create_feedback(self, user_id: UUID, message: str, rating: int, now: datetime) -> Feedback:
        feedback = Feedback(user_id=user_id, message=message, rating=rating, created_at=now)
        self.db.add(feedback)
        self.db.flush()
        return feedback
