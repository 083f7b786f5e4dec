"""
7-day trend series for the dashboard chart (oldest -> newest).
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Sequence

from services.sleep_score import compute_sleep_score
from services.sleep_time import normalize_date

TREND_POINTS = 7

# Fixed English labels; strftime("%a") would follow the process locale
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass
class TrendPoint:
    day: str  # "Mon"
    date: str  # "Feb 10"
    quality: int  # 1-5
    score: int  # 0-100

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_trend_data(checkins: Sequence, profile=None) -> List[TrendPoint]:
    """
    Args:
        checkins: sorted newest first (as the repository returns them)
    """
    ordered = list(reversed(checkins))[-TREND_POINTS:]

    points = []
    for c in ordered:
        d = normalize_date(c.checkin_date)
        points.append(TrendPoint(
            day=_WEEKDAYS[d.weekday()],
            date=f"{_MONTHS[d.month - 1]} {d.day}",
            quality=c.sleep_quality,
            score=compute_sleep_score(c, profile),
        ))
    return points
