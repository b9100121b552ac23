from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from flask import request

from streakify.config import Config
from streakify.utils.errors import APIError


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


def streak_zone() -> ZoneInfo:
	return ZoneInfo(Config.STREAK_TIMEZONE)


def local_date(moment: datetime, tz: ZoneInfo | None = None) -> date:
	"""Calendar date of ``moment`` in the streak timezone.

	Naive datetimes are taken to be UTC, which is how Firestore hands them back.
	"""
	if moment.tzinfo is None:
		moment = moment.replace(tzinfo=timezone.utc)
	return moment.astimezone(tz or streak_zone()).date()


def start_of_local_day(now: datetime | None = None, tz: ZoneInfo | None = None) -> datetime:
	tz = tz or streak_zone()
	day = local_date(now or utc_now(), tz)
	return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


def get_json(required: list[str] | None = None) -> dict:
	data = request.get_json(silent=True) or {}
	if required:
		missing = [k for k in required if k not in data]
		if missing:
			raise APIError(f"Missing fields: {', '.join(missing)}", 400)
	return data


def require_text(value, field: str, max_length: int = 500) -> str:
	text = (value or "").strip() if isinstance(value, str) else ""
	if not text:
		raise APIError(f"{field} is required", 400)
	if len(text) > max_length:
		raise APIError(f"{field} must be at most {max_length} characters", 400)
	return text


def serialize(value):
	"""Make Firestore documents JSON friendly (timestamps to ISO strings)."""
	if isinstance(value, datetime):
		if value.tzinfo is None:
			value = value.replace(tzinfo=timezone.utc)
		return value.isoformat()
	if isinstance(value, dict):
		return {k: serialize(v) for k, v in value.items()}
	if isinstance(value, (list, tuple)):
		return [serialize(v) for v in value]
	return value
