"""
Dashboard view model: everything the home screen shows, from the most
recent check-ins (newest first) and the active profile.
"""
from datetime import date
from typing import Any, Dict, Sequence

from services.nightly_missions import generate_missions
from services.sleep_debt import compute_sleep_debt
from services.sleep_score import compute_sleep_score, compute_weekly_score
from services.sleep_streak import compute_streak, get_streak_message
from services.sleep_trend import build_trend_data


def build_dashboard(checkins: Sequence, profile, today: date) -> Dict[str, Any]:
    streak = compute_streak(checkins, today=today)
    return {
        "sleep_score": compute_sleep_score(checkins[0], profile) if checkins else 0,
        "weekly_score": compute_weekly_score(checkins, profile),
        "streak": streak,
        "streak_message": get_streak_message(streak),
        "sleep_debt": compute_sleep_debt(checkins, profile),
        "missions": [m.to_dict() for m in generate_missions(profile)],
        "trend": [p.to_dict() for p in build_trend_data(checkins, profile)],
        "checkin_count": len(checkins),
    }
