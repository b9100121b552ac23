from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from streakify.utils.helpers import local_date


class StreakOutcome(str, enum.Enum):

	NOOP = "noop"
	INCREMENT = "increment"
	RESET = "reset"


@dataclass(frozen=True)
class StreakUpdate:

	outcome: StreakOutcome
	count: int

	@property
	def changed(self) -> bool:
		return self.outcome is not StreakOutcome.NOOP


class StreakService:
	"""Calendar-day streak rules shared by personal and friendship streaks."""

	def __init__(self, tz: ZoneInfo | None = None):
		self.tz = tz

	def evaluate(self, last: datetime | None, now: datetime, current: int | None) -> StreakUpdate:
		current = current or 0
		if last is None:
			return StreakUpdate(StreakOutcome.RESET, 1)
		gap = (local_date(now, self.tz) - local_date(last, self.tz)).days
		if gap <= 0:
			# Already counted today (or a clock skewed into the future)
			return StreakUpdate(StreakOutcome.NOOP, current)
		if gap == 1:
			return StreakUpdate(StreakOutcome.INCREMENT, current + 1)
		return StreakUpdate(StreakOutcome.RESET, 1)

	def is_alive(self, last: datetime | None, now: datetime) -> bool:
		if last is None:
			return False
		return (local_date(now, self.tz) - local_date(last, self.tz)).days <= 1

	def displayed_count(self, last: datetime | None, now: datetime, stored: int | None) -> int:
		return (stored or 0) if self.is_alive(last, now) else 0

	def active_days(self, timestamps: Iterable[datetime | None], year: int, month: int) -> list[int]:
		days = set()
		for ts in timestamps:
			if ts is None:
				continue
			day = local_date(ts, self.tz)
			if day.year == year and day.month == month:
				days.add(day.day)
		return sorted(days)

	def days_until_break(self, last: datetime | None, now: datetime) -> int:
		"""Calendar days, today included, left to log before the streak breaks."""
		if not self.is_alive(last, now):
			return 0
		deadline = local_date(last, self.tz) + timedelta(days=1)
		return (deadline - local_date(now, self.tz)).days + 1


streak_service = StreakService()
