from __future__ import annotations

import logging

from firebase_admin import firestore
from google.cloud.firestore_v1 import FieldFilter

from streakify.services.firebase_service import Collections, firebase_service
from streakify.services.friend_service import friend_service
from streakify.services.scoring_service import scoring_service
from streakify.services.streak_service import StreakOutcome, streak_service
from streakify.services.user_service import user_service
from streakify.utils.errors import APIError, ForbiddenError, NotFoundError
from streakify.utils.helpers import require_text, start_of_local_day, utc_now


logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "proofURL", "proofStoragePath", "pomodoroMinutes")


def _minutes(value) -> int:
	try:
		minutes = int(value or 0)
	except (TypeError, ValueError) as e:
		raise APIError("pomodoroMinutes must be a number", 400) from e
	if minutes < 0:
		raise APIError("pomodoroMinutes cannot be negative", 400)
	return minutes


class LogService:

	def _logs(self):
		return firebase_service.collection(Collections.DAILY_LOGS)

	def create_log(self, user_id: str, data: dict) -> dict:
		title = require_text(data.get("title"), "title", 120)
		minutes = _minutes(data.get("pomodoroMinutes"))
		user_service.get_profile(user_id)
		friendship_id = data.get("friendshipId") or None
		if friendship_id:
			# Raises unless the author belongs to the friendship
			friend_service.get_friendship(friendship_id, user_id)

		log = {
			"userId": user_id,
			"title": title,
			"description": (data.get("description") or "").strip(),
			"proofURL": data.get("proofURL") or "",
			"proofStoragePath": data.get("proofStoragePath") or "",
			"pomodoroMinutes": minutes,
			"friendshipId": friendship_id,
			"timestamp": utc_now(),
			"verified": False,
			"reactions": {},
		}
		ref = self._logs().document()
		ref.set(log)

		streak = user_service.update_user_streak(user_id)
		points = scoring_service.points_for_log(minutes, streak.count, first_today=streak.outcome is not StreakOutcome.NOOP)
		user_service.add_points(user_id, points)

		result = {"id": ref.id, **log, "streakCount": streak.count, "pointsEarned": points}
		if friendship_id:
			result["friendshipStreak"] = friend_service.update_friendship_streak(friendship_id).count
		logger.info("Log %s created by %s (+%d points)", ref.id, user_id, points)
		return result

	def get_log(self, log_id: str) -> dict:
		snap = self._logs().document(log_id).get()
		if not snap.exists:
			raise NotFoundError("Log not found")
		return {"id": snap.id, **(snap.to_dict() or {})}

	def _owned(self, log_id: str, user_id: str) -> dict:
		log = self.get_log(log_id)
		if log.get("userId") != user_id:
			raise ForbiddenError("Only the author can change this log")
		return log

	def update_log(self, log_id: str, user_id: str, data: dict) -> dict:
		self._owned(log_id, user_id)
		updates = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
		if not updates:
			raise APIError("No editable fields provided", 400)
		if "title" in updates:
			updates["title"] = require_text(updates["title"], "title", 120)
		if "pomodoroMinutes" in updates:
			updates["pomodoroMinutes"] = _minutes(updates["pomodoroMinutes"])
		self._logs().document(log_id).update(updates)
		return self.get_log(log_id)

	def delete_log(self, log_id: str, user_id: str) -> None:
		self._owned(log_id, user_id)
		self._logs().document(log_id).delete()
		logger.info("Log %s deleted by %s", log_id, user_id)

	def toggle_reaction(self, log_id: str, user_id: str, reaction: str) -> dict:
		log = self.get_log(log_id)
		reactions = dict(log.get("reactions") or {})
		if reactions.get(user_id) == reaction:
			del reactions[user_id]
		else:
			reactions[user_id] = reaction
		self._logs().document(log_id).update({"reactions": reactions})
		return reactions

	def get_todays_log(self, user_id: str) -> dict | None:
		snaps = (
			self._logs()
			.where(filter=FieldFilter("userId", "==", user_id))
			.where(filter=FieldFilter("timestamp", ">=", start_of_local_day()))
			.limit(1)
			.get()
		)
		if not snaps:
			return None
		return {"id": snaps[0].id, **(snaps[0].to_dict() or {})}

	def get_recent_logs(self, limit: int = 20) -> list[dict]:
		snaps = self._logs().order_by("timestamp", direction=firestore.Query.DESCENDING).limit(limit).get()
		return [{"id": s.id, **(s.to_dict() or {})} for s in snaps]

	def _sorted(self, snaps) -> list[dict]:
		logs = [{"id": s.id, **(s.to_dict() or {})} for s in snaps]
		# Sorted here to avoid a composite index on (field, timestamp)
		logs.sort(key=lambda log: log.get("timestamp") or utc_now(), reverse=True)
		return logs

	def list_user_logs(self, user_id: str) -> list[dict]:
		snaps = self._logs().where(filter=FieldFilter("userId", "==", user_id)).get()
		return self._sorted(snaps)

	def list_friendship_logs(self, friendship_id: str, user_id: str) -> list[dict]:
		friend_service.get_friendship(friendship_id, user_id)
		snaps = self._logs().where(filter=FieldFilter("friendshipId", "==", friendship_id)).get()
		return self._sorted(snaps)

	def calendar(self, logs: list[dict], year: int, month: int) -> dict:
		if not 1 <= month <= 12:
			raise APIError("month must be between 1 and 12", 400)
		days = streak_service.active_days((log.get("timestamp") for log in logs), year, month)
		return {"year": year, "month": month, "activeDays": days}


log_service = LogService()
