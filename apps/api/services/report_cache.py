"""
Weekly Report Cache Policy

The newest saved report is served as-is while it is younger than the
freshness window; after that (or on an explicit regenerate) a new one is
generated and saved.

Stored format: report_text holds the structured report as JSON and the row
carries schema_version = REPORT_SCHEMA_VERSION. Rows written before the tag
existed (schema_version NULL) may hold JSON or plain narrative text; those go
through decode_legacy_report() so they still render.
"""
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from services.report_generator import ReportParseError, coerce_report

logger = logging.getLogger(__name__)

REPORT_SCHEMA_VERSION = 1

REPORT_FIELDS = (
    "sleep_score",
    "sleep_score_label",
    "key_wins",
    "pattern_insights",
    "focus_recommendation",
    "coach_note",
)


class UnsupportedReportSchema(ValueError):
    """Stored report carries a schema version this build does not know."""


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def report_age(created_at: datetime, now: datetime) -> timedelta:
    return _as_utc(now) - _as_utc(created_at)


def is_report_fresh(created_at: Optional[datetime], now: datetime, ttl: timedelta) -> bool:
    if created_at is None:
        return False
    return report_age(created_at, now) < ttl


def encode_report(report: Dict[str, Any]) -> str:
    return json.dumps({key: report[key] for key in REPORT_FIELDS})


def degraded_report(text: str) -> Dict[str, Any]:
    """Wrap narrative-only text so it renders in the structured layout."""
    return {
        "sleep_score": 0,
        "sleep_score_label": "N/A",
        "key_wins": [],
        "pattern_insights": [],
        "focus_recommendation": "",
        "coach_note": text,
    }


def decode_legacy_report(report_text: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(report_text)
    except (json.JSONDecodeError, TypeError):
        return degraded_report(report_text)
    if not isinstance(parsed, dict):
        return degraded_report(report_text)
    try:
        return coerce_report(parsed, focus_default="", coach_default="").to_dict()
    except ReportParseError as e:
        logger.info(f"Legacy weekly report has no usable score, degrading: {e}")
        return degraded_report(report_text)


def decode_stored_report(report_text: str, schema_version: Optional[int]) -> Dict[str, Any]:
    """
    Raises:
        UnsupportedReportSchema: the row was written by a newer schema
    """
    if schema_version is None:
        logger.debug("Decoding legacy weekly report row")
        return decode_legacy_report(report_text)
    if schema_version != REPORT_SCHEMA_VERSION:
        raise UnsupportedReportSchema(f"Unknown weekly report schema version: {schema_version}")
    return json.loads(report_text)
