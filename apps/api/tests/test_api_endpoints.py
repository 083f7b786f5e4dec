"""
HTTP-level tests for the /v1 API using FastAPI's TestClient.

The database, clock and text generator are replaced through dependency
overrides in conftest.py.
"""
import json
from datetime import date, datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

TODAY = date(2025, 2, 12)
NOW = datetime(2025, 2, 12, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def user(client):
    response = client.post("/v1/users", json={"name": "Layla", "email": "Layla@Example.com", "age": 21})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def profile(client, user):
    response = client.post("/v1/sleep-profiles", json={
        "user_id": user["id"],
        "bedtime_goal": "23:00",
        "wakeup_goal": "07:00",
        "sleep_challenges": ["phone", "stress", "phone"],
    })
    assert response.status_code == 201
    return response.json()


def _checkin(client, user_id, day, **overrides):
    payload = {
        "user_id": user_id,
        "checkin_date": day.isoformat(),
        "bedtime": "23:00",
        "wakeup_time": "07:00",
        "sleep_quality": 4,
        "mood": 4,
        "phone_before_bed": False,
    }
    payload.update(overrides)
    return client.post("/v1/checkins", json=payload)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestUsers:
    def test_register_lowercases_email(self, user):
        assert user["email"] == "layla@example.com"
        assert user["name"] == "Layla"

    def test_register_again_returns_same_user(self, client, user):
        response = client.post("/v1/users", json={"name": "Layla K", "email": "layla@example.com"})
        assert response.status_code == 201
        assert response.json()["id"] == user["id"]
        assert response.json()["name"] == "Layla K"

    def test_lookup_by_email(self, client, user):
        assert client.get("/v1/users/layla@example.com").json()["id"] == user["id"]

    def test_unknown_email(self, client):
        response = client.get("/v1/users/nobody@example.com")
        assert response.status_code == 404
        assert response.json() == {"detail": "User not found", "error_code": "NOT_FOUND"}

    def test_blank_name_rejected(self, client):
        response = client.post("/v1/users", json={"name": "   ", "email": "a@b.co"})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR_NAME"

    def test_bad_email_rejected(self, client):
        assert client.post("/v1/users", json={"name": "A", "email": "not-an-email"}).status_code == 422


class TestProfiles:
    def test_duplicate_challenges_collapsed(self, profile):
        assert profile["sleep_challenges"] == ["phone", "stress"]

    def test_get_profile(self, client, profile, user):
        assert client.get(f"/v1/sleep-profiles/{user['id']}").json()["id"] == profile["id"]

    def test_missing_profile(self, client, user):
        response = client.get(f"/v1/sleep-profiles/{user['id']}")
        assert response.status_code == 404
        assert response.json()["detail"] == "Sleep profile not found"

    @pytest.mark.parametrize("field,value", [
        ("bedtime_goal", "25:00"),
        ("wakeup_goal", "7:00"),
        ("sleep_challenges", ["snoring"]),
    ])
    def test_invalid_input(self, client, user, field, value):
        payload = {"user_id": user["id"], "bedtime_goal": "23:00", "wakeup_goal": "07:00"}
        payload[field] = value
        assert client.post("/v1/sleep-profiles", json=payload).status_code == 422

    def test_unknown_user(self, client):
        response = client.post("/v1/sleep-profiles", json={
            "user_id": str(uuid4()), "bedtime_goal": "23:00", "wakeup_goal": "07:00",
        })
        assert response.status_code == 404


class TestCheckins:
    def test_submit_returns_feedback(self, client, profile, user, fake_generator):
        fake_generator.responses.append("You slept a full 8 hours. Keep the same bedtime tonight.")

        response = _checkin(client, user["id"], TODAY, notes="Felt rested")

        assert response.status_code == 201
        body = response.json()
        assert body["sleep_hours"] == 8.0
        assert body["notes"] == "Felt rested"
        assert body["daily_feedback"] == "You slept a full 8 hours. Keep the same bedtime tonight."

    def test_feedback_failure_does_not_fail_submission(self, client, user, fake_generator):
        fake_generator.error = RuntimeError("generator down")

        response = _checkin(client, user["id"], TODAY)

        assert response.status_code == 201
        assert response.json()["daily_feedback"] == ""

    def test_resubmit_same_day_overwrites(self, client, user):
        first = _checkin(client, user["id"], TODAY, sleep_quality=2).json()
        second = _checkin(client, user["id"], TODAY, sleep_quality=5, bedtime="00:30").json()

        assert second["id"] == first["id"]
        assert second["sleep_quality"] == 5
        assert second["sleep_hours"] == 6.5
        assert len(client.get(f"/v1/checkins/{user['id']}").json()) == 1

    @pytest.mark.parametrize("overrides", [
        {"sleep_quality": 6},
        {"mood": 0},
        {"sleep_quality": "4"},
        {"bedtime": "11pm"},
        {"notes": "x" * 501},
        {"checkin_date": "2025-02-30"},
    ])
    def test_invalid_checkin(self, client, user, overrides):
        assert _checkin(client, user["id"], TODAY, **overrides).status_code == 422

    def test_unknown_user(self, client):
        assert _checkin(client, str(uuid4()), TODAY).status_code == 404

    def test_list_newest_first_with_limit(self, client, user):
        for offset in range(10):
            _checkin(client, user["id"], TODAY - timedelta(days=offset))

        default = client.get(f"/v1/checkins/{user['id']}").json()
        limited = client.get(f"/v1/checkins/{user['id']}", params={"limit": 3}).json()

        assert len(default) == 7
        assert [c["checkin_date"] for c in limited] == ["2025-02-12", "2025-02-11", "2025-02-10"]

    def test_summary(self, client, user):
        _checkin(client, user["id"], TODAY, sleep_quality=5, phone_before_bed=True)
        _checkin(client, user["id"], TODAY - timedelta(days=1), sleep_quality=3)
        _checkin(client, user["id"], TODAY - timedelta(days=20), sleep_quality=1)

        summary = client.get(f"/v1/checkins/{user['id']}/summary").json()

        assert summary["total_checkins"] == 2
        assert summary["avg_quality"] == 4.0
        assert summary["phone_nights"] == 1


class TestDashboard:
    def test_dashboard(self, client, profile, user):
        for offset in range(3):
            _checkin(client, user["id"], TODAY - timedelta(days=offset), bedtime="00:00")

        body = client.get(f"/v1/dashboard/{user['id']}").json()

        # quality 4 -> 30, mood 4 -> 22.5, 60 minutes off goal -> 0
        assert body["sleep_score"] == 53
        assert body["weekly_score"] == 53
        assert body["streak"] == 3
        assert body["streak_message"] == "3-day streak, keep going!"
        assert body["sleep_debt"] == 3.0
        assert [m["id"] for m in body["missions"]] == ["bedtime", "phone", "stress"]
        assert [p["date"] for p in body["trend"]] == ["Feb 10", "Feb 11", "Feb 12"]
        assert body["checkin_count"] == 3

    def test_new_user(self, client, user):
        body = client.get(f"/v1/dashboard/{user['id']}").json()
        assert body["sleep_score"] == 0
        assert body["streak"] == 0
        assert body["streak_message"] == "Start your streak tonight!"
        assert body["sleep_debt"] == 0.0
        assert [m["id"] for m in body["missions"]] == ["water", "screen", "journal"]
        assert body["trend"] == []

    def test_unknown_user(self, client):
        assert client.get(f"/v1/dashboard/{uuid4()}").status_code == 404


class TestWeeklyReports:
    def test_legacy_report_without_score_still_renders(self, client, profile, user, repo, db_session):
        _checkin(client, user["id"], TODAY)
        raw = json.dumps({"summary": "old format"})
        repo.save_report(UUID(user["id"]), raw, {"total_checkins": 1},
                         date(2025, 2, 5), TODAY, None, NOW - timedelta(hours=1))
        db_session.commit()

        response = client.get(f"/v1/reports/{user['id']}/weekly")

        assert response.status_code == 200
        body = response.json()
        assert body["cached"] is True
        assert body["report"]["sleep_score"] == 0
        assert body["report"]["sleep_score_label"] == "N/A"
        assert body["report"]["coach_note"] == raw

    def test_generate_then_cached(self, client, profile, user, fake_generator):
        for offset in range(5):
            _checkin(client, user["id"], TODAY - timedelta(days=offset))
        fake_generator.responses[:] = [json.dumps({
            "sleep_score": 84,
            "key_wins": ["Five nights logged"],
            "pattern_insights": [],
            "focus_recommendation": "Keep it up",
            "coach_note": "Strong week.",
        })]

        first = client.get(f"/v1/reports/{user['id']}/weekly")
        second = client.get(f"/v1/reports/{user['id']}/weekly")

        assert first.status_code == 200
        body = first.json()
        assert body["report"]["sleep_score"] == 84
        assert body["report"]["sleep_score_label"] == "Excellent"
        assert body["weekStart"] == "2025-02-05"
        assert body["weekEnd"] == "2025-02-12"
        assert body["isPartial"] is False
        assert body["cached"] is False
        assert body["stats"]["total_checkins"] == 5

        assert second.json()["cached"] is True
        assert second.json()["report"] == body["report"]

    def test_regenerate_and_by_date(self, client, profile, user):
        _checkin(client, user["id"], TODAY)

        generated = client.get(f"/v1/reports/{user['id']}/weekly", params={"regenerate": "true"}).json()
        by_date = client.get(f"/v1/reports/{user['id']}/by-date", params={"date": "2025-02-10"}).json()

        assert generated["isPartial"] is True
        assert by_date["report"] == generated["report"]
        assert by_date["weekStart"] == generated["weekStart"]
        assert "cached" not in by_date

    def test_by_date_not_found(self, client, user):
        response = client.get(f"/v1/reports/{user['id']}/by-date", params={"date": "2025-02-10"})
        assert response.status_code == 404
        assert response.json()["detail"] == "No report found for this date"

    def test_not_found_messages(self, client, user):
        response = client.get(f"/v1/reports/{user['id']}/weekly")
        assert response.status_code == 404
        assert response.json()["detail"] == "No sleep profile found. Complete onboarding first."

    def test_no_checkins(self, client, profile, user):
        response = client.get(f"/v1/reports/{user['id']}/weekly")
        assert response.status_code == 404
        assert response.json()["detail"] == "No check-ins found. Log your first sleep entry to get a report."


class TestFeedback:
    def test_submit(self, client, user):
        response = client.post("/v1/feedback", json={"user_id": user["id"], "message": " Love it ", "rating": 5})
        assert response.status_code == 201
        assert response.json()["message"] == "Love it"

    def test_rating_out_of_range(self, client, user):
        response = client.post("/v1/feedback", json={"user_id": user["id"], "message": "ok", "rating": 9})
        assert response.status_code == 422

    def test_blank_message_rejected(self, client, user):
        response = client.post("/v1/feedback", json={"user_id": user["id"], "message": "   ", "rating": 4})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR_MESSAGE"


def test_serve_runs_uvicorn_with_configured_address():
    from unittest.mock import patch

    import main
    from core.config import settings

    with patch("uvicorn.run") as run:
        main.serve()

    run.assert_called_once_with(main.app, host=settings.API_HOST, port=settings.API_PORT, log_config=None)
