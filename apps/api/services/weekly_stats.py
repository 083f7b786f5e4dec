"""
Weekly Statistics

Pre-computes everything the weekly report talks about, so the text generator
only narrates numbers it was given:

- WeeklyStats over the trailing window (or the latest N check-ins)
- PreviousWeekStats for week-over-week comparison
- trend labels with a +/-0.1 dead-zone
- phone-use vs sleep-quality correlation with a 0.3 dead-zone
- keyword frequency from free-text notes
"""
import re
from collections import Counter
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Sequence

WINDOW_DAYS = 7
TREND_DEAD_ZONE = 0.1
PHONE_DEAD_ZONE = 0.3
MAX_KEYWORDS = 10
MIN_KEYWORD_LENGTH = 3

STOP_WORDS = frozenset({
    "i", "a", "the", "was", "had", "my", "to", "and", "it", "but",
    "so", "in", "of", "for", "on", "is", "at", "this", "that", "with",
})

_NON_LETTERS = re.compile(r"[^a-z\s]")


@dataclass
class WeeklyStats:
    total_checkins: int
    avg_quality: Optional[float]
    avg_mood: Optional[float]
    avg_sleep_hours: Optional[float]
    earliest_bedtime: Optional[str]
    latest_bedtime: Optional[str]
    earliest_wakeup: Optional[str]
    latest_wakeup: Optional[str]
    phone_nights: int
    avg_quality_phone: Optional[float]
    avg_quality_no_phone: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PreviousWeekStats:
    total_checkins: int
    avg_quality: Optional[float]
    avg_mood: Optional[float]
    avg_sleep_hours: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def window_bounds(today: date) -> Dict[str, date]:
    """
    Date windows relative to today.

    current:  [today - 7, today]        (inclusive of both ends)
    previous: [today - 14, today - 7)
    """
    return {
        "current_start": today - timedelta(days=WINDOW_DAYS),
        "current_end": today,
        "previous_start": today - timedelta(days=2 * WINDOW_DAYS),
        "previous_end": today - timedelta(days=WINDOW_DAYS),
    }


def _avg(values: Iterable) -> Optional[float]:
    """Mean rounded half-up to one decimal, None for no values."""
    decimals = [Decimal(str(v)) for v in values if v is not None]
    if not decimals:
        return None
    mean = sum(decimals) / Decimal(len(decimals))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def compute_weekly_stats(checkins: Sequence) -> WeeklyStats:
    bedtimes = sorted(c.bedtime for c in checkins if c.bedtime)
    wakeups = sorted(c.wakeup_time for c in checkins if c.wakeup_time)
    phone = [c for c in checkins if c.phone_before_bed]
    no_phone = [c for c in checkins if not c.phone_before_bed]

    return WeeklyStats(
        total_checkins=len(checkins),
        avg_quality=_avg(c.sleep_quality for c in checkins),
        avg_mood=_avg(c.mood for c in checkins),
        avg_sleep_hours=_avg(c.sleep_hours for c in checkins),
        earliest_bedtime=bedtimes[0] if bedtimes else None,
        latest_bedtime=bedtimes[-1] if bedtimes else None,
        earliest_wakeup=wakeups[0] if wakeups else None,
        latest_wakeup=wakeups[-1] if wakeups else None,
        phone_nights=len(phone),
        avg_quality_phone=_avg(c.sleep_quality for c in phone),
        avg_quality_no_phone=_avg(c.sleep_quality for c in no_phone),
    )


def compute_previous_week_stats(checkins: Sequence) -> PreviousWeekStats:
    return PreviousWeekStats(
        total_checkins=len(checkins),
        avg_quality=_avg(c.sleep_quality for c in checkins),
        avg_mood=_avg(c.mood for c in checkins),
        avg_sleep_hours=_avg(c.sleep_hours for c in checkins),
    )


def trend_label(current: Optional[float], previous: Optional[float]) -> str:
    if current is None or previous is None:
        return "no data"
    diff = current - previous
    if abs(diff) < TREND_DEAD_ZONE:
        return "stable"
    if diff > 0:
        return f"improved (+{diff:.1f})"
    return f"declined ({diff:.1f})"


def phone_correlation_insight(stats: WeeklyStats) -> str:
    """Compare average quality on phone-free nights against phone nights."""
    if stats.phone_nights <= 0 or stats.avg_quality_no_phone is None:
        return "No phone data available"

    diff = stats.avg_quality_no_phone - (stats.avg_quality_phone or 0)
    if diff > PHONE_DEAD_ZONE:
        return f"Sleep quality is {diff:.1f} points higher on nights without phone use"
    if diff < -PHONE_DEAD_ZONE:
        return "Phone use before bed did not seem to affect quality this week"
    return "No significant difference between phone/no-phone nights"


def extract_note_keywords(checkins: Sequence, limit: int = MAX_KEYWORDS) -> List[str]:
    """
    Most frequent meaningful words across notes.

    Ties keep first-seen order.
    """
    counts: Counter = Counter()
    for c in checkins:
        if not c.notes:
            continue
        cleaned = _NON_LETTERS.sub("", c.notes.lower())
        for word in cleaned.split():
            if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS:
                counts[word] += 1
    return [word for word, _ in counts.most_common(limit)]
