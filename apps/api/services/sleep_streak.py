"""
Check-in Streak

Counts consecutive calendar days with a check-in, anchored at today or
yesterday. Input is sorted newest first with one row per day.
"""
from datetime import date
from typing import Optional, Sequence

from core.clock import SystemClock
from services.sleep_time import days_between, normalize_date


def compute_streak(checkins: Sequence, today: Optional[date] = None) -> int:
    """
    Length of the current daily streak.

    A most-recent check-in older than yesterday means the streak is broken.
    Otherwise the walk goes back pairwise and stops at the first gap that is
    not exactly one day (a repeated date also stops it).
    """
    if not checkins:
        return 0

    if today is None:
        today = SystemClock().today()

    dates = [normalize_date(c.checkin_date) for c in checkins]

    if days_between(dates[0], today) > 1:
        return 0

    streak = 1
    for newer, older in zip(dates, dates[1:]):
        if days_between(older, newer) != 1:
            break
        streak += 1
    return streak


def get_streak_message(streak: int) -> str:
    if streak <= 0:
        return "Start your streak tonight!"
    if streak == 1:
        return "Day 1, great start!"
    if streak < 4:
        return f"{streak}-day streak, keep going!"
    if streak < 7:
        return f"{streak}-day streak, almost a full week!"
    if streak == 7:
        return "7-day streak, perfect week!"
    return f"{streak}-day streak, incredible!"
