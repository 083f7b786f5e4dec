"""
Weekly Report Pipeline

weekly_report(user_id, regenerate):
    1. user and active profile must exist
    2. stats over the trailing 7-day window; if empty, over the latest 7
       check-ins; if the user never checked in, not found
    3. unless regenerate, serve the newest saved report while it is fresh
    4. previous-week stats, keywords, phone correlation, trend labels
    5-7. text generator with validation, deterministic fallback on failure
    8. persist, then return

No locking: two concurrent regenerations both save a row and the newest by
created_at becomes the current report.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from core.clock import Clock, SystemClock
from core.config import Settings, settings as default_settings
from core.exceptions import NotFoundError
from models import SleepCheckin, WeeklyReport
from services.report_cache import (
    REPORT_SCHEMA_VERSION,
    UnsupportedReportSchema,
    decode_stored_report,
    encode_report,
    is_report_fresh,
)
from services.report_generator import generate_weekly_report
from services.sleep_repository import SleepRepository
from services.text_generation import TextGenerator
from services.weekly_stats import (
    WINDOW_DAYS,
    WeeklyStats,
    compute_previous_week_stats,
    compute_weekly_stats,
    window_bounds,
)

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
PROFILE_NOT_FOUND = "No sleep profile found. Complete onboarding first."
NO_CHECKINS = "No check-ins found. Log your first sleep entry to get a report."
NO_REPORT_FOR_DATE = "No report found for this date"


@dataclass
class WeeklyReportResult:
    report: Dict[str, Any]
    stats: Dict[str, Any]
    week_start: date
    week_end: date
    generated_at: datetime
    is_partial: bool
    cached: bool

    def to_response(self) -> Dict[str, Any]:
        return {
            "report": self.report,
            "stats": self.stats,
            "weekStart": self.week_start,
            "weekEnd": self.week_end,
            "generatedAt": self.generated_at,
            "isPartial": self.is_partial,
            "cached": self.cached,
        }


class WeeklyReportService:
    """
    Usage:
        service = WeeklyReportService(SleepRepository(db), generator, clock)
        result = service.weekly_report(user_id, regenerate=False)
    """

    def __init__(
        self,
        repository: SleepRepository,
        generator: Optional[TextGenerator] = None,
        clock: Optional[Clock] = None,
        config: Optional[Settings] = None,
    ):
        self.repository = repository
        self.generator = generator
        self.clock = clock or SystemClock()
        self.config = config or default_settings

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(hours=self.config.REPORT_CACHE_TTL_HOURS)

    def _is_partial(self, total_checkins: int) -> bool:
        return total_checkins < self.config.REPORT_FULL_WEEK_MIN_CHECKINS

    def weekly_report(self, user_id: UUID, regenerate: bool = False) -> WeeklyReportResult:
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)

        profile = self.repository.get_profile(user_id)
        if profile is None:
            raise NotFoundError(PROFILE_NOT_FOUND)

        today = self.clock.today()
        stats, checkins = self._current_stats(user_id, today)

        if not regenerate:
            cached = self._fresh_cached_report(user_id)
            if cached is not None:
                return cached

        bounds = window_bounds(today)
        previous = compute_previous_week_stats(
            self.repository.list_checkins_in_window(user_id, bounds["previous_start"], bounds["previous_end"])
        )

        report = generate_weekly_report(
            self.generator, user.name, stats, profile, previous, checkins
        ).to_dict()

        week_start = today - timedelta(days=WINDOW_DAYS)
        week_end = today
        now = self.clock.now()
        stats_snapshot = stats.to_dict()
        saved = self.repository.save_report(
            user_id,
            encode_report(report),
            stats_snapshot,
            week_start,
            week_end,
            REPORT_SCHEMA_VERSION,
            now,
        )
        logger.info(
            f"Weekly report generated for {user_id} "
            f"(checkins={stats.total_checkins}, score={report['sleep_score']}, regenerate={regenerate})"
        )

        return WeeklyReportResult(
            report=report,
            stats=stats_snapshot,
            week_start=saved.week_start,
            week_end=saved.week_end,
            generated_at=now,
            is_partial=self._is_partial(stats.total_checkins),
            cached=False,
        )

    def report_for_date(self, user_id: UUID, day: date) -> WeeklyReportResult:
        saved = self.repository.get_report_for_date(user_id, day)
        if saved is None:
            raise NotFoundError(NO_REPORT_FOR_DATE)
        try:
            return self._from_saved(saved)
        except UnsupportedReportSchema as e:
            logger.warning(f"Skipping weekly report {saved.id}: {e}")
            raise NotFoundError(NO_REPORT_FOR_DATE) from e

    def _current_stats(self, user_id: UUID, today: date) -> Tuple[WeeklyStats, List[SleepCheckin]]:
        bounds = window_bounds(today)
        checkins = self.repository.list_checkins_in_window(
            user_id, bounds["current_start"], bounds["current_end"] + timedelta(days=1)
        )

        if not checkins:
            if self.repository.count_checkins(user_id) == 0:
                raise NotFoundError(NO_CHECKINS)
            logger.info(f"No check-ins in the last {WINDOW_DAYS} days for {user_id}; using most recent")
            checkins = self.repository.list_checkins(user_id, WINDOW_DAYS)

        return compute_weekly_stats(checkins), checkins

    def _fresh_cached_report(self, user_id: UUID) -> Optional[WeeklyReportResult]:
        existing = self.repository.get_latest_report(user_id)
        if existing is None:
            return None
        if not is_report_fresh(existing.created_at, self.clock.now(), self.cache_ttl):
            return None
        try:
            return self._from_saved(existing, cached=True)
        except UnsupportedReportSchema as e:
            logger.warning(f"Cached weekly report {existing.id} unreadable, regenerating: {e}")
            return None

    def _from_saved(self, saved: WeeklyReport, cached: bool = False) -> WeeklyReportResult:
        report = decode_stored_report(saved.report_text, saved.schema_version)
        stats = saved.stats or {}
        return WeeklyReportResult(
            report=report,
            stats=stats,
            week_start=saved.week_start,
            week_end=saved.week_end,
            generated_at=saved.created_at,
            is_partial=self._is_partial(int(stats.get("total_checkins") or 0)),
            cached=cached,
        )
