"""
Daily Feedback

A two-sentence note returned with each check-in: one observation about the
night, one tip for tonight. Best-effort only. Any failure is logged and
yields an empty string; the check-in itself has already been saved.
"""
import logging
from typing import Optional

from services.text_generation import RESPONSE_TEXT, TextGenerator

logger = logging.getLogger(__name__)

FEEDBACK_MAX_TOKENS = 100
FEEDBACK_TEMPERATURE = 0.7


def build_daily_feedback_prompt(checkin, profile=None) -> str:
    lines = [
        "You are a friendly sleep coach for students. Write EXACTLY 2 short sentences.",
        "Sentence 1: One observation about this night's sleep.",
        "Sentence 2: One small, actionable tip for tonight.",
        "",
        "Data:",
        f"- Slept {float(checkin.sleep_hours or 0):g} hours",
        f"- Sleep quality: {checkin.sleep_quality}/5",
        f"- Mood: {checkin.mood}/5",
        f"- Used phone before bed: {'yes' if checkin.phone_before_bed else 'no'}",
    ]
    if checkin.notes:
        lines.append(f'- Notes: "{checkin.notes}"')
    if profile is not None and profile.bedtime_goal:
        lines.append(f"- Bedtime goal: {profile.bedtime_goal}")
    if profile is not None and profile.sleep_challenges:
        lines.append(f"- Challenges: {', '.join(profile.sleep_challenges)}")
    lines += [
        "",
        "Rules:",
        "- Max 2 sentences total",
        "- Friendly, warm tone",
        "- No medical language",
        "- Be specific to the data above",
    ]
    return "\n".join(lines)


def generate_daily_feedback(generator: Optional[TextGenerator], checkin, profile=None) -> str:
    if generator is None:
        return ""
    try:
        text = generator.generate(
            build_daily_feedback_prompt(checkin, profile),
            RESPONSE_TEXT,
            max_output_tokens=FEEDBACK_MAX_TOKENS,
            temperature=FEEDBACK_TEMPERATURE,
        )
    except Exception as e:
        logger.warning(f"Daily feedback generation failed (non-critical): {e}")
        return ""
    return (text or "").strip()
