"""
Weekly Report Generator

Turns pre-computed weekly numbers into the structured report the client
renders:

    sleep_score, sleep_score_label, key_wins[], pattern_insights[],
    focus_recommendation, coach_note

The text generator is asked for that JSON object. Its output is untrusted,
so it is cleaned and validated here; anything unusable (call failure, empty
text, invalid JSON, non-numeric score) falls back to a deterministic report
built from the same numbers. Report generation therefore never fails once
the stats exist.
"""
import json
import logging
import math
import re
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Sequence

from services.sleep_score import round_half_up, score_label
from services.text_generation import RESPONSE_JSON, TextGenerator
from services.weekly_stats import (
    PreviousWeekStats,
    WeeklyStats,
    extract_note_keywords,
    phone_correlation_insight,
    trend_label,
)

logger = logging.getLogger(__name__)

DEFAULT_FOCUS_RECOMMENDATION = "Keep logging your sleep daily to get better insights."
DEFAULT_COACH_NOTE = "Keep up the great work! Every night of tracking brings you closer to better sleep."

FALLBACK_FOCUS_RECOMMENDATION = (
    "Try to keep a consistent bedtime this week and see how it affects your energy."
)

# Fallback score terms
FALLBACK_QUALITY_WEIGHT = 40
FALLBACK_HOURS_WEIGHT = 30
FALLBACK_COMPLETENESS_WEIGHT = 30
FALLBACK_TARGET_HOURS = 8
FALLBACK_FULL_WEEK_CHECKINS = 5
FALLBACK_DEFAULT_QUALITY = 3
FALLBACK_DEFAULT_HOURS = 7

REPORT_MAX_TOKENS = 500
REPORT_TEMPERATURE = 0.6

SYSTEM_PROMPT = "You are a sleep coaching AI. Return only valid JSON. No markdown. No explanation."

_CODE_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CODE_FENCE_CLOSE = re.compile(r"\s*```$")


class ReportParseError(ValueError):
    """Generator output could not be turned into a structured report."""


@dataclass
class StructuredReport:
    sleep_score: int
    sleep_score_label: str
    key_wins: List[str] = field(default_factory=list)
    pattern_insights: List[str] = field(default_factory=list)
    focus_recommendation: str = ""
    coach_note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _fmt(value: Optional[float], missing: str = "n/a") -> str:
    if value is None:
        return missing
    return f"{value:g}"


def build_weekly_prompt(
    user_name: str,
    stats: WeeklyStats,
    profile,
    prev_stats: Optional[PreviousWeekStats],
    checkins: Sequence,
) -> str:
    """Compose the report prompt from the numbers computed for this week."""
    keywords = extract_note_keywords(checkins)
    prev_quality = prev_stats.avg_quality if prev_stats else None
    prev_mood = prev_stats.avg_mood if prev_stats else None
    prev_hours = prev_stats.avg_sleep_hours if prev_stats else None
    challenges = ", ".join(profile.sleep_challenges or []) or "none"

    return f"""You are a friendly, data-driven sleep coach for students and young professionals.
Analyze the following pre-computed sleep data and return a structured JSON report.

USER: {user_name}
GOALS: Bedtime {profile.bedtime_goal}, Wake-up {profile.wakeup_goal}
CHALLENGES: {challenges}

THIS WEEK ({stats.total_checkins} check-ins):
- Avg sleep: {_fmt(stats.avg_sleep_hours)} hours
- Avg quality: {_fmt(stats.avg_quality)}/5
- Avg mood: {_fmt(stats.avg_mood)}/5
- Bedtime range: {stats.earliest_bedtime} to {stats.latest_bedtime}
- Wake range: {stats.earliest_wakeup} to {stats.latest_wakeup}
- Phone before bed: {stats.phone_nights}/{stats.total_checkins} nights

TRENDS vs last week:
- Quality: {trend_label(stats.avg_quality, prev_quality)}
- Mood: {trend_label(stats.avg_mood, prev_mood)}
- Sleep hours: {trend_label(stats.avg_sleep_hours, prev_hours)}

PHONE CORRELATION: {phone_correlation_insight(stats)}
NOTE KEYWORDS: {", ".join(keywords) if keywords else "none"}

Return ONLY valid JSON in this exact format (no markdown, no code blocks):
{{
  "sleep_score": <number 0-100>,
  "sleep_score_label": "<Excellent|Good|Fair|Poor>",
  "key_wins": ["<positive habit 1>", "<positive habit 2>"],
  "pattern_insights": ["<behavior correlation 1>", "<pattern 2>"],
  "focus_recommendation": "<one main actionable recommendation>",
  "coach_note": "<2-3 sentence motivational summary comparing to last week>"
}}

Rules:
- sleep_score: base on quality (40%), consistency (30%), sleep hours vs 8h goal (30%)
- key_wins: 1-3 positive observations. Be specific.
- pattern_insights: 1-3 data-backed correlations. Reference phone data if relevant.
- focus_recommendation: One clear, simple action for next week.
- coach_note: Warm, encouraging. Compare progress to last week. No medical claims.
- All text must be short and scannable."""


def _coerce_score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ReportParseError(f"sleep_score is not numeric: {value!r}")
    try:
        number = float(value)
    except ValueError as e:
        raise ReportParseError(f"sleep_score is not numeric: {value!r}") from e
    if not math.isfinite(number):
        raise ReportParseError(f"sleep_score is not finite: {value!r}")
    return int(round_half_up(max(0.0, min(100.0, number))))


def _coerce_text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _coerce_text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def parse_report_response(content: Optional[str]) -> StructuredReport:
    """
    Clean and validate generator output.

    Raises:
        ReportParseError: empty output, invalid JSON, non-object JSON, or a
            missing / non-numeric sleep_score
    """
    if not content or not content.strip():
        raise ReportParseError("Empty response")

    cleaned = _CODE_FENCE_CLOSE.sub("", _CODE_FENCE_OPEN.sub("", content.strip())).strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ReportParseError(f"Response is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise ReportParseError("Response JSON is not an object")

    return coerce_report(parsed)


def coerce_report(
    parsed: Dict[str, Any],
    focus_default: str = DEFAULT_FOCUS_RECOMMENDATION,
    coach_default: str = DEFAULT_COACH_NOTE,
) -> StructuredReport:
    """
    Build a StructuredReport from a loosely shaped dict.

    Raises:
        ReportParseError: missing or non-numeric sleep_score
    """
    score = _coerce_score(parsed.get("sleep_score"))
    label = parsed.get("sleep_score_label")
    if not isinstance(label, str) or not label.strip():
        label = score_label(score)

    return StructuredReport(
        sleep_score=score,
        sleep_score_label=label,
        key_wins=_coerce_text_list(parsed.get("key_wins")),
        pattern_insights=_coerce_text_list(parsed.get("pattern_insights")),
        focus_recommendation=_coerce_text(parsed.get("focus_recommendation"), focus_default),
        coach_note=_coerce_text(parsed.get("coach_note"), coach_default),
    )


def build_fallback_report(
    stats: WeeklyStats,
    prev_stats: Optional[PreviousWeekStats] = None,
) -> StructuredReport:
    """
    Deterministic report from the weekly numbers alone.

    Score = quality (40) + hours vs 8h, capped (30) + completeness (30).
    """
    quality = stats.avg_quality or FALLBACK_DEFAULT_QUALITY
    hours = stats.avg_sleep_hours or FALLBACK_DEFAULT_HOURS
    total = stats.total_checkins

    raw = (
        quality / 5 * FALLBACK_QUALITY_WEIGHT
        + min(hours / FALLBACK_TARGET_HOURS, 1) * FALLBACK_HOURS_WEIGHT
        + min(total / FALLBACK_FULL_WEEK_CHECKINS, 1) * FALLBACK_COMPLETENESS_WEIGHT
    )
    score = int(round_half_up(raw))

    key_wins = [
        f"Logged {total} check-in{'s' if total > 1 else ''} this week",
        "Maintained good sleep quality"
        if (stats.avg_quality or 0) >= 3.5
        else "Stayed consistent with tracking",
    ]
    pattern_insights = [
        f"Average sleep: {_fmt(stats.avg_sleep_hours, 'N/A')} hours per night",
        f"Used phone before bed {stats.phone_nights} nights"
        if stats.phone_nights > 0
        else "Avoided phone before bed most nights",
    ]

    if prev_stats is not None and prev_stats.avg_quality:
        direction = "improved" if (stats.avg_quality or 0) >= prev_stats.avg_quality else "dipped"
        coach_note = (
            f"Your quality {direction} compared to last week. "
            "Keep tracking consistently, you're building great habits!"
        )
    else:
        coach_note = (
            "Great job tracking your sleep! Keep it up and you'll start seeing "
            "patterns that can help you sleep better."
        )

    return StructuredReport(
        sleep_score=score,
        sleep_score_label=score_label(score),
        key_wins=key_wins,
        pattern_insights=pattern_insights,
        focus_recommendation=FALLBACK_FOCUS_RECOMMENDATION,
        coach_note=coach_note,
    )


def generate_weekly_report(
    generator: Optional[TextGenerator],
    user_name: str,
    stats: WeeklyStats,
    profile,
    prev_stats: Optional[PreviousWeekStats],
    checkins: Sequence,
) -> StructuredReport:
    """Ask the generator for a report; fall back locally on any failure."""
    if generator is None:
        logger.info("No text generator configured; using deterministic weekly report")
        return build_fallback_report(stats, prev_stats)

    prompt = build_weekly_prompt(user_name, stats, profile, prev_stats, checkins)
    try:
        content = generator.generate(
            prompt,
            RESPONSE_JSON,
            system_instruction=SYSTEM_PROMPT,
            max_output_tokens=REPORT_MAX_TOKENS,
            temperature=REPORT_TEMPERATURE,
        )
        return parse_report_response(content)
    except ReportParseError as e:
        logger.warning(f"Weekly report response unusable, using fallback: {e}")
    except Exception as e:
        logger.error(f"Weekly report generation failed, using fallback: {e}")
    return build_fallback_report(stats, prev_stats)
