"""
Sleep Debt

Cumulative shortfall against the profile's goal duration, summed over the
check-ins the caller supplies (the caller picks the window).
Positive = under-slept, negative = surplus.
"""
from typing import Sequence

from services.sleep_score import round_half_up
from services.sleep_time import hours_of_sleep


def compute_sleep_debt(checkins: Sequence, profile=None) -> float:
    if profile is None or not checkins:
        return 0.0
    if not profile.bedtime_goal or not profile.wakeup_goal:
        return 0.0

    goal_hours = hours_of_sleep(profile.bedtime_goal, profile.wakeup_goal)
    total = sum(goal_hours - hours_of_sleep(c.bedtime, c.wakeup_time) for c in checkins)
    return round_half_up(total, 1)
