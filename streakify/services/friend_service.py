from __future__ import annotations

import logging

from firebase_admin import firestore
from google.cloud.firestore_v1 import FieldFilter

from streakify.services.firebase_service import Collections, firebase_service
from streakify.services.streak_service import StreakUpdate, streak_service
from streakify.services.user_service import user_service
from streakify.utils.errors import APIError, ForbiddenError, NotFoundError
from streakify.utils.helpers import utc_now


logger = logging.getLogger(__name__)

# Firestore caps the operand list of an "in" filter
IN_QUERY_LIMIT = 10


def _member_card(profile: dict) -> dict:
	return {"name": profile.get("name", ""), "photo": profile.get("photoURL") or ""}


class FriendService:

	def _friendships(self):
		return firebase_service.collection(Collections.FRIENDSHIPS)

	def _requests(self):
		return firebase_service.collection(Collections.FRIEND_REQUESTS)

	# ---------- Friendships ----------
	def _find_friendship(self, user_id: str, other_id: str) -> dict | None:
		snaps = self._friendships().where(filter=FieldFilter("members", "array_contains", user_id)).get()
		for s in snaps:
			data = s.to_dict() or {}
			if other_id in data.get("members", []):
				return {"id": s.id, **data}
		return None

	def create_friendship(self, user_id: str, other_id: str) -> str:
		if user_id == other_id:
			raise APIError("You cannot start a streak with yourself", 400)
		existing = self._find_friendship(user_id, other_id)
		if existing:
			return existing["id"]
		me = user_service.get_profile(user_id)
		other = user_service.get_profile(other_id)
		ref = self._friendships().document()
		ref.set({
			"id": ref.id,
			"members": [user_id, other_id],
			"memberData": {
				user_id: _member_card(me),
				other_id: _member_card(other),
			},
			"streakCount": 0,
			"lastLogDate": None,
			"createdAt": utc_now(),
		})
		logger.info("Friendship %s created between %s and %s", ref.id, user_id, other_id)
		return ref.id

	def list_friendships(self, user_id: str) -> list[dict]:
		snaps = self._friendships().where(filter=FieldFilter("members", "array_contains", user_id)).get()
		now = utc_now()
		friendships = []
		for s in snaps:
			data = {"id": s.id, **(s.to_dict() or {})}
			data["activeStreak"] = streak_service.displayed_count(data.get("lastLogDate"), now, data.get("streakCount"))
			friendships.append(data)
		return friendships

	def get_friendship(self, friendship_id: str, user_id: str | None = None) -> dict:
		snap = self._friendships().document(friendship_id).get()
		if not snap.exists:
			raise NotFoundError("Friendship not found")
		data = {"id": snap.id, **(snap.to_dict() or {})}
		if user_id is not None and user_id not in data.get("members", []):
			raise ForbiddenError("Not a member of this friendship")
		return data

	def update_friendship_streak(self, friendship_id: str) -> StreakUpdate:
		data = self.get_friendship(friendship_id)
		now = utc_now()
		update = streak_service.evaluate(data.get("lastLogDate"), now, data.get("streakCount"))
		if update.changed:
			self._friendships().document(friendship_id).update({
				"streakCount": update.count,
				"lastLogDate": now,
			})
			logger.info("Friendship streak %s: %s -> %d", friendship_id, update.outcome.value, update.count)
		return update

	# ---------- Requests ----------
	def send_friend_request(self, from_id: str, to_id: str) -> str:
		if from_id == to_id:
			raise APIError("You cannot befriend yourself", 400)
		sender = user_service.get_profile(from_id)
		if to_id in (sender.get("friends") or []):
			raise APIError("Already friends", 400)
		user_service.get_profile(to_id)
		pending = (
			self._requests()
			.where(filter=FieldFilter("fromId", "==", from_id))
			.where(filter=FieldFilter("toId", "==", to_id))
			.where(filter=FieldFilter("status", "==", "pending"))
			.limit(1)
			.get()
		)
		if pending:
			raise APIError("Friend request already sent", 409)
		ref = self._requests().document()
		ref.set({
			"fromId": from_id,
			"fromName": sender.get("name", ""),
			"fromPhoto": sender.get("photoURL") or "",
			"toId": to_id,
			"status": "pending",
			"timestamp": utc_now(),
		})
		return ref.id

	def list_friend_requests(self, user_id: str) -> list[dict]:
		snaps = (
			self._requests()
			.where(filter=FieldFilter("toId", "==", user_id))
			.where(filter=FieldFilter("status", "==", "pending"))
			.get()
		)
		return [{"id": s.id, **(s.to_dict() or {})} for s in snaps]

	def _pending_request_for(self, request_id: str, user_id: str) -> dict:
		snap = self._requests().document(request_id).get()
		if not snap.exists:
			raise NotFoundError("Friend request not found")
		data = snap.to_dict() or {}
		if data.get("toId") != user_id:
			raise ForbiddenError("This request is not addressed to you")
		if data.get("status") != "pending":
			raise APIError("Friend request already handled", 409)
		return data

	def accept_friend_request(self, request_id: str, user_id: str) -> None:
		data = self._pending_request_for(request_id, user_id)
		from_id = data["fromId"]
		user_service.get_profile(from_id)
		user_service.get_profile(user_id)
		users = firebase_service.collection(Collections.USERS)
		users.document(from_id).update({"friends": firestore.ArrayUnion([user_id])})
		users.document(user_id).update({"friends": firestore.ArrayUnion([from_id])})
		self._requests().document(request_id).update({"status": "accepted"})
		logger.info("Friend request %s accepted", request_id)

	def reject_friend_request(self, request_id: str, user_id: str) -> None:
		self._pending_request_for(request_id, user_id)
		self._requests().document(request_id).update({"status": "rejected"})

	def get_friends_list(self, user_id: str) -> list[dict]:
		friend_ids = user_service.get_profile(user_id).get("friends") or []
		users = firebase_service.collection(Collections.USERS)
		friends = []
		for start in range(0, len(friend_ids), IN_QUERY_LIMIT):
			chunk = friend_ids[start:start + IN_QUERY_LIMIT]
			snaps = users.where(filter=FieldFilter("uid", "in", chunk)).get()
			friends.extend(s.to_dict() for s in snaps)
		return friends


friend_service = FriendService()
