"""
Sleep Score (0-100)

Per-night composite of three terms:
    quality      (1-5 -> 0-40)
    mood         (1-5 -> 0-30)
    consistency  (0-30): how close bedtime was to the profile's goal

Without a bedtime goal the consistency term is fixed at half credit (15).
Each term is bounded by construction, so the total needs no clamping.
"""
import math
from typing import Optional, Sequence

from services.sleep_time import time_to_minutes

QUALITY_WEIGHT = 40
MOOD_WEIGHT = 30
CONSISTENCY_WEIGHT = 30
DEFAULT_CONSISTENCY = 15  # no goal to compare against
# Each minute of bedtime deviation costs half a point: 60+ minutes off = 0
CONSISTENCY_POINTS_PER_MINUTE = 0.5


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round with .5 going toward +infinity (2.5 -> 3, -2.5 -> -2).

    Python's round() is banker's rounding; scores and debt must not flip
    between neighbours depending on parity.
    """
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def _rating_term(rating: int, weight: int) -> float:
    return (rating - 1) / 4 * weight


def consistency_score(bedtime: str, profile) -> float:
    goal = getattr(profile, "bedtime_goal", None) if profile is not None else None
    if not goal:
        return DEFAULT_CONSISTENCY
    diff = abs(time_to_minutes(bedtime) - time_to_minutes(goal))
    return max(0.0, CONSISTENCY_WEIGHT - diff * CONSISTENCY_POINTS_PER_MINUTE)


def compute_sleep_score(checkin, profile=None) -> int:
    """
    Score a single check-in.

    Args:
        checkin: object with sleep_quality, mood and bedtime
        profile: sleep profile (bedtime_goal) or None

    Returns:
        Integer score in [0, 100]
    """
    total = (
        _rating_term(checkin.sleep_quality, QUALITY_WEIGHT)
        + _rating_term(checkin.mood, MOOD_WEIGHT)
        + consistency_score(checkin.bedtime, profile)
    )
    return int(round_half_up(total))


def compute_weekly_score(checkins: Sequence, profile=None) -> int:
    """Mean per-night score, 0 when there are no check-ins."""
    if not checkins:
        return 0
    total = sum(compute_sleep_score(c, profile) for c in checkins)
    return int(round_half_up(total / len(checkins)))


def score_label(score: Optional[float]) -> str:
    if score is None:
        return "Poor"
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Fair"
    return "Poor"
