from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:

	base_points_per_log: int = 10
	points_per_focus_minute: int = 1
	streak_bonus_per_day: int = 2
	max_bonus_days: int = 30


class ScoringService:

	def __init__(self, rules: ScoringRules | None = None):
		self.rules = rules or ScoringRules()

	def points_for_log(self, pomodoro_minutes: int, streak_count: int, first_today: bool = True) -> int:
		# Focus minutes always count; the base award and streak bonus once per day
		points = max(0, int(pomodoro_minutes or 0)) * self.rules.points_per_focus_minute
		if first_today:
			bonus_days = min(max(0, streak_count - 1), self.rules.max_bonus_days)
			points += self.rules.base_points_per_log + bonus_days * self.rules.streak_bonus_per_day
		return points


scoring_service = ScoringService()
