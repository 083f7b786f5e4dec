"""
Tests for the weekly report generator: prompt content, response sanitizing
and the deterministic fallback.
"""
import json
from types import SimpleNamespace

import pytest

from services.report_generator import (
    DEFAULT_COACH_NOTE,
    DEFAULT_FOCUS_RECOMMENDATION,
    FALLBACK_FOCUS_RECOMMENDATION,
    SYSTEM_PROMPT,
    ReportParseError,
    build_fallback_report,
    build_weekly_prompt,
    generate_weekly_report,
    parse_report_response,
)
from services.text_generation import RESPONSE_JSON, TextGenerationError
from services.weekly_stats import PreviousWeekStats, WeeklyStats
from tests.fakes import FakeTextGenerator

PROFILE = SimpleNamespace(bedtime_goal="23:00", wakeup_goal="07:00", sleep_challenges=["phone"])


def _stats(total=5, quality=4.0, hours=8.0, phone_nights=0, mood=3.5):
    return WeeklyStats(
        total_checkins=total,
        avg_quality=quality,
        avg_mood=mood,
        avg_sleep_hours=hours,
        earliest_bedtime="22:30",
        latest_bedtime="23:45",
        earliest_wakeup="06:00",
        latest_wakeup="07:30",
        phone_nights=phone_nights,
        avg_quality_phone=2.0 if phone_nights else None,
        avg_quality_no_phone=quality,
    )


VALID_REPORT = {
    "sleep_score": 81,
    "sleep_score_label": "Excellent",
    "key_wins": ["Consistent bedtime"],
    "pattern_insights": ["Better sleep without phone"],
    "focus_recommendation": "Keep the phone out of the bedroom",
    "coach_note": "Great week!",
}


class TestParseReportResponse:
    def test_plain_json(self):
        report = parse_report_response(json.dumps(VALID_REPORT))
        assert report.to_dict() == VALID_REPORT

    def test_strips_code_fences(self):
        content = "```json\n" + json.dumps(VALID_REPORT) + "\n```"
        assert parse_report_response(content).sleep_score == 81

    @pytest.mark.parametrize("raw,expected", [
        (120, 100),
        (-5, 0),
        (87.5, 88),
        ("64", 64),
    ])
    def test_score_clamped_and_rounded(self, raw, expected):
        report = parse_report_response(json.dumps({**VALID_REPORT, "sleep_score": raw}))
        assert report.sleep_score == expected

    def test_label_derived_when_missing(self):
        payload = {k: v for k, v in VALID_REPORT.items() if k != "sleep_score_label"}
        payload["sleep_score"] = 45
        assert parse_report_response(json.dumps(payload)).sleep_score_label == "Fair"

    def test_lists_and_text_defaults(self):
        report = parse_report_response(json.dumps({
            "sleep_score": 70,
            "key_wins": "not a list",
            "pattern_insights": ["one", None, 2],
            "coach_note": "   ",
        }))
        assert report.key_wins == []
        assert report.pattern_insights == ["one", "2"]
        assert report.focus_recommendation == DEFAULT_FOCUS_RECOMMENDATION
        assert report.coach_note == DEFAULT_COACH_NOTE

    @pytest.mark.parametrize("content", [
        "",
        "   ",
        "Here is your report: great job!",
        "[1, 2, 3]",
        json.dumps({**VALID_REPORT, "sleep_score": "high"}),
        json.dumps({**VALID_REPORT, "sleep_score": True}),
        json.dumps({k: v for k, v in VALID_REPORT.items() if k != "sleep_score"}),
        '{"sleep_score": NaN}',
    ])
    def test_unusable_output_raises(self, content):
        with pytest.raises(ReportParseError):
            parse_report_response(content)


class TestFallbackReport:
    def test_full_week(self):
        report = build_fallback_report(_stats(total=5, quality=4.0, hours=8.0))

        # 4/5*40 + 1*30 + 1*30
        assert report.sleep_score == 92
        assert report.sleep_score_label == "Excellent"
        assert report.key_wins == ["Logged 5 check-ins this week", "Maintained good sleep quality"]
        assert report.pattern_insights == [
            "Average sleep: 8 hours per night",
            "Avoided phone before bed most nights",
        ]
        assert report.focus_recommendation == FALLBACK_FOCUS_RECOMMENDATION
        assert report.coach_note.startswith("Great job tracking your sleep!")

    def test_missing_averages_use_defaults(self):
        report = build_fallback_report(_stats(total=1, quality=None, hours=None, phone_nights=1))

        # 3/5*40 + 7/8*30 + 1/5*30 = 56.25
        assert report.sleep_score == 56
        assert report.sleep_score_label == "Fair"
        assert report.key_wins == ["Logged 1 check-in this week", "Stayed consistent with tracking"]
        assert report.pattern_insights == [
            "Average sleep: N/A hours per night",
            "Used phone before bed 1 nights",
        ]

    def test_coach_note_compares_with_last_week(self):
        prev = PreviousWeekStats(total_checkins=4, avg_quality=3.0, avg_mood=3.0, avg_sleep_hours=7.0)
        improved = build_fallback_report(_stats(quality=4.0), prev)
        dipped = build_fallback_report(_stats(quality=2.5), prev)

        assert improved.coach_note.startswith("Your quality improved compared to last week.")
        assert dipped.coach_note.startswith("Your quality dipped compared to last week.")


class TestGenerateWeeklyReport:
    def test_uses_generator_output(self):
        generator = FakeTextGenerator(responses=[json.dumps(VALID_REPORT)])
        report = generate_weekly_report(generator, "Layla", _stats(), PROFILE, None, [])

        assert report.to_dict() == VALID_REPORT
        assert generator.calls[0]["response_hint"] == RESPONSE_JSON
        assert generator.calls[0]["system_instruction"] == SYSTEM_PROMPT

    def test_falls_back_on_generator_error(self):
        generator = FakeTextGenerator(error=TextGenerationError("timeout"))
        report = generate_weekly_report(generator, "Layla", _stats(), PROFILE, None, [])
        assert report.sleep_score == 92
        assert report.focus_recommendation == FALLBACK_FOCUS_RECOMMENDATION

    def test_falls_back_on_unusable_output(self):
        generator = FakeTextGenerator(responses=["I cannot produce JSON today."])
        report = generate_weekly_report(generator, "Layla", _stats(), PROFILE, None, [])
        assert report.sleep_score == 92

    def test_no_generator_skips_the_call(self):
        report = generate_weekly_report(None, "Layla", _stats(), PROFILE, None, [])
        assert report.sleep_score == 92


def test_prompt_carries_precomputed_numbers():
    prev = PreviousWeekStats(total_checkins=3, avg_quality=3.5, avg_mood=3.5, avg_sleep_hours=8.0)
    checkins = [SimpleNamespace(notes="Stressed about exams")]
    prompt = build_weekly_prompt("Layla", _stats(phone_nights=2), PROFILE, prev, checkins)

    assert "USER: Layla" in prompt
    assert "GOALS: Bedtime 23:00, Wake-up 07:00" in prompt
    assert "CHALLENGES: phone" in prompt
    assert "- Avg quality: 4/5" in prompt
    assert "- Phone before bed: 2/5 nights" in prompt
    assert "- Quality: improved (+0.5)" in prompt
    assert "- Mood: stable" in prompt
    assert "- Sleep hours: stable" in prompt
    assert "NOTE KEYWORDS: stressed, about, exams" in prompt
    assert "Sleep quality is 2.0 points higher" in prompt
