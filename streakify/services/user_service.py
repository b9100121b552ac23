from __future__ import annotations

import logging

from firebase_admin import firestore
from google.cloud.firestore_v1 import FieldFilter

from streakify.services.firebase_service import Collections, firebase_service
from streakify.services.streak_service import StreakUpdate, streak_service
from streakify.utils.errors import APIError, NotFoundError
from streakify.utils.helpers import utc_now


logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "username", "bio", "photoURL")
PREFIX_SENTINEL = "\uf8ff"


class UserService:

	def _users(self):
		return firebase_service.collection(Collections.USERS)

	def create_profile(self, uid: str, name: str, username: str, email: str) -> dict:
		ref = self._users().document(uid)
		snap = ref.get()
		if snap.exists:
			return snap.to_dict() or {}
		profile = {
			"uid": uid,
			"name": name,
			"username": username,
			"email": email,
			"photoURL": "",
			"bio": "",
			"createdAt": utc_now(),
			"streakCount": 0,
			"longestStreak": 0,
			"productivityScore": 0,
			"friends": [],
			"lastSubmission": None,
		}
		ref.set(profile)
		logger.info("Created profile for %s", uid)
		return profile

	def find_profile(self, uid: str) -> dict | None:
		snap = self._users().document(uid).get()
		if not snap.exists:
			return None
		return snap.to_dict() or {}

	def get_profile(self, uid: str) -> dict:
		profile = self.find_profile(uid)
		if profile is None:
			raise NotFoundError("User not found")
		return profile

	def update_profile(self, uid: str, updates: dict) -> dict:
		clean = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS}
		if not clean:
			raise APIError("No editable fields provided", 400)
		for key, value in clean.items():
			if not isinstance(value, str):
				raise APIError(f"{key} must be a string", 400)
		if "username" in clean and not clean["username"].strip():
			raise APIError("username cannot be empty", 400)
		self.get_profile(uid)
		self._users().document(uid).set(clean, merge=True)
		return self.get_profile(uid)

	def update_user_streak(self, uid: str) -> StreakUpdate:
		profile = self.get_profile(uid)
		now = utc_now()
		update = streak_service.evaluate(profile.get("lastSubmission"), now, profile.get("streakCount"))
		if not update.changed:
			return update
		longest = max(profile.get("longestStreak", 0) or 0, update.count)
		self._users().document(uid).set({
			"streakCount": update.count,
			"longestStreak": longest,
			"lastSubmission": now,
		}, merge=True)
		logger.info("Streak for %s: %s -> %d", uid, update.outcome.value, update.count)
		return update

	def add_points(self, uid: str, points: int) -> None:
		if points <= 0:
			return
		self._users().document(uid).update({"productivityScore": firestore.Increment(points)})

	def list_users(self, limit: int = 50) -> list[dict]:
		snaps = self._users().limit(limit).get()
		return [s.to_dict() for s in snaps]

	def search_users(self, term: str, exclude_uid: str | None = None, limit: int = 20) -> list[dict]:
		if not term:
			return []
		query = (
			self._users()
			.order_by("username")
			.start_at({"username": term})
			.end_at({"username": term + PREFIX_SENTINEL})
			.limit(limit)
		)
		return [u for u in (s.to_dict() for s in query.get()) if u.get("uid") != exclude_uid]

	def get_stats(self, uid: str) -> dict:
		profile = self.get_profile(uid)
		logs = (
			firebase_service.collection(Collections.DAILY_LOGS)
			.where(filter=FieldFilter("userId", "==", uid))
			.get()
		)
		last = profile.get("lastSubmission")
		now = utc_now()
		return {
			"currentStreak": streak_service.displayed_count(last, now, profile.get("streakCount")),
			"longestStreak": profile.get("longestStreak", 0),
			"productivityScore": profile.get("productivityScore", 0),
			"logsCompleted": len(logs),
			"focusMinutes": sum(int((s.to_dict() or {}).get("pomodoroMinutes") or 0) for s in logs),
			"daysUntilBreak": streak_service.days_until_break(last, now),
			"lastSubmission": last,
		}


user_service = UserService()
