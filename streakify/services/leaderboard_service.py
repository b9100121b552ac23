from __future__ import annotations

from firebase_admin import firestore

from streakify.services.firebase_service import Collections, firebase_service
from streakify.services.streak_service import streak_service
from streakify.utils.errors import NotFoundError
from streakify.utils.helpers import utc_now


METRICS = {
	"streak": "streakCount",
	"score": "productivityScore",
}


def _live_streak(user: dict, now) -> int:
	return streak_service.displayed_count(user.get("lastSubmission"), now, user.get("streakCount"))


def _row(rank: int, user: dict, now) -> dict:
	return {
		"rank": rank,
		"uid": user.get("uid", ""),
		"name": user.get("name", ""),
		"username": user.get("username", ""),
		"photoURL": user.get("photoURL") or "",
		"streakCount": _live_streak(user, now),
		"productivityScore": user.get("productivityScore", 0),
	}


class LeaderboardService:

	def _ordered(self, field: str):
		users = firebase_service.collection(Collections.USERS)
		return users.order_by(field, direction=firestore.Query.DESCENDING)

	def _values(self, metric: str, now) -> list[tuple[dict, int]]:
		"""All users with their metric value, highest first."""
		field = METRICS[metric]
		users = [{"uid": s.id, **(s.to_dict() or {})} for s in self._ordered(field).get()]
		if metric == "streak":
			# Stored counts of broken streaks only reset on the next log
			values = [(u, _live_streak(u, now)) for u in users]
			values.sort(key=lambda pair: pair[1], reverse=True)
			return values
		return [(u, u.get(field, 0) or 0) for u in users]

	def get_leaderboard(self, metric: str = "streak", limit: int = 50) -> list[dict]:
		now = utc_now()
		if metric == "streak":
			users = [u for u, _ in self._values(metric, now)[:limit]]
		else:
			snaps = self._ordered(METRICS[metric]).limit(limit).get()
			users = [{"uid": s.id, **(s.to_dict() or {})} for s in snaps]
		return [_row(idx, u, now) for idx, u in enumerate(users, start=1)]

	def get_global_leaderboard(self, limit: int = 50) -> list[dict]:
		return self.get_leaderboard("streak", limit)

	def get_top_scorers(self, limit: int = 50) -> list[dict]:
		return self.get_leaderboard("score", limit)

	def get_user_rank(self, user_id: str, metric: str = "streak") -> dict:
		values = [(u["uid"], v) for u, v in self._values(metric, utc_now())]
		position = next((idx for idx, (uid, _) in enumerate(values) if uid == user_id), None)
		if position is None:
			raise NotFoundError("User not found")
		mine = values[position][1]
		# Ties share a rank
		rank = 1 + sum(1 for _, v in values if v > mine)
		ahead = [v for _, v in values if v > mine]
		return {
			"metric": metric,
			"currentRank": rank,
			"totalUsers": len(values),
			"value": mine,
			"toNextRank": (min(ahead) - mine) if ahead else 0,
		}


leaderboard_service = LeaderboardService()
