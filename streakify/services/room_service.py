from __future__ import annotations

import logging
from datetime import datetime

from firebase_admin import firestore
from google.cloud.firestore_v1 import FieldFilter

from streakify.services.firebase_service import Collections, firebase_service
from streakify.services.user_service import user_service
from streakify.utils.errors import APIError, ForbiddenError, NotFoundError
from streakify.utils.helpers import require_text, utc_now


logger = logging.getLogger(__name__)

DEFAULT_DURATION = 25 * 60
MAX_DURATION = 4 * 60 * 60
ROOM_STATUSES = ("focus", "break", "idle")
SYSTEM_SENDER = "system"


def remaining_seconds(room: dict, now: datetime | None = None) -> int:
	"""Seconds left on the room timer as seen at ``now``."""
	duration = int(room.get("duration") or DEFAULT_DURATION)
	start = room.get("startTime")
	if room.get("status") == "idle" or start is None:
		return duration
	elapsed = int(((now or utc_now()) - start).total_seconds())
	return max(0, duration - elapsed)


def _display_name(profile: dict | None, fallback: str) -> str:
	return (profile or {}).get("name") or fallback


class RoomService:

	def _rooms(self):
		return firebase_service.collection(Collections.ROOMS)

	def _messages(self, room_id: str):
		return self._rooms().document(room_id).collection(Collections.MESSAGES)

	def _tasks(self, room_id: str):
		return self._rooms().document(room_id).collection(Collections.ROOM_TASKS)

	def get_room(self, room_id: str) -> dict:
		snap = self._rooms().document(room_id).get()
		if not snap.exists:
			raise NotFoundError("Room not found")
		return snap.to_dict() or {}

	def _member_room(self, room_id: str, user_id: str) -> dict:
		room = self.get_room(room_id)
		if user_id not in room.get("memberIds", []):
			raise ForbiddenError("Join the room first")
		return room

	def _hosted_room(self, room_id: str, user_id: str) -> dict:
		room = self.get_room(room_id)
		if room.get("hostId") != user_id:
			raise ForbiddenError("Only the host can do that")
		return room

	# ---------- Lifecycle ----------
	def create_room(self, host_id: str, name: str = "") -> dict:
		profile = user_service.find_profile(host_id)
		host_name = _display_name(profile, "Host")
		ref = self._rooms().document()
		room = {
			"id": ref.id,
			"hostId": host_id,
			"hostName": host_name,
			"name": (name or "").strip() or f"{host_name}'s Room",
			"status": "idle",
			"startTime": None,
			"duration": DEFAULT_DURATION,
			"members": [{
				"uid": host_id,
				"name": host_name,
				"photo": (profile or {}).get("photoURL") or "",
				"bio": (profile or {}).get("bio") or "",
				"currentTask": "",
			}],
			"memberIds": [host_id],
			"active": True,
		}
		ref.set(room)
		logger.info("Room %s created by %s", ref.id, host_id)
		return room

	def join_room(self, room_id: str, user_id: str) -> dict:
		room = self.get_room(room_id)
		profile = user_service.find_profile(user_id)
		name = _display_name(profile, "Guest")
		members = room.get("members") or []
		existing = next((m for m in members if m.get("uid") == user_id), None)
		entry = {
			"uid": user_id,
			"name": name,
			"photo": (profile or {}).get("photoURL") or "",
			"bio": (profile or {}).get("bio") or "",
			"currentTask": (existing or {}).get("currentTask", ""),
		}
		self._rooms().document(room_id).update({
			"members": [m for m in members if m.get("uid") != user_id] + [entry],
			"memberIds": firestore.ArrayUnion([user_id]),
		})
		self.send_system_message(room_id, f"{name} joined {room.get('name') or 'the room'}")
		return self.get_room(room_id)

	def leave_room(self, room_id: str, user_id: str) -> None:
		room = self.get_room(room_id)
		members = room.get("members") or []
		leaving = next((m for m in members if m.get("uid") == user_id), None)
		if leaving is None:
			return
		self.send_system_message(room_id, f"{leaving.get('name') or 'Someone'} left the room")
		self._rooms().document(room_id).update({
			"members": [m for m in members if m.get("uid") != user_id],
			"memberIds": firestore.ArrayRemove([user_id]),
		})

	def update_member_status(self, room_id: str, user_id: str, task: str) -> dict:
		room = self._member_room(room_id, user_id)
		task = (task or "").strip()[:200]
		members = [
			{**m, "currentTask": task} if m.get("uid") == user_id else m
			for m in room.get("members") or []
		]
		self._rooms().document(room_id).update({"members": members})
		return self.get_room(room_id)

	def delete_room(self, room_id: str, user_id: str) -> None:
		self._hosted_room(room_id, user_id)
		# Subcollections outlive their parent document in Firestore
		for sub in (self._messages(room_id), self._tasks(room_id)):
			for snap in sub.get():
				snap.reference.delete()
		self._rooms().document(room_id).delete()
		logger.info("Room %s deleted by host", room_id)

	def list_user_rooms(self, user_id: str) -> list[dict]:
		snaps = self._rooms().where(filter=FieldFilter("memberIds", "array_contains", user_id)).get()
		return [s.to_dict() for s in snaps]

	# ---------- Host controls ----------
	def update_room_status(self, room_id: str, user_id: str, status: str, duration: int = DEFAULT_DURATION) -> dict:
		self._hosted_room(room_id, user_id)
		if status not in ROOM_STATUSES:
			raise APIError(f"status must be one of {', '.join(ROOM_STATUSES)}", 400)
		try:
			duration = int(duration)
		except (TypeError, ValueError) as e:
			raise APIError("duration must be a number of seconds", 400) from e
		if not 0 < duration <= MAX_DURATION:
			raise APIError(f"duration must be between 1 and {MAX_DURATION} seconds", 400)
		self._rooms().document(room_id).update({
			"status": status,
			"duration": duration,
			"startTime": None if status == "idle" else utc_now(),
		})
		logger.info("Room %s -> %s (%ds)", room_id, status, duration)
		return self.get_room(room_id)

	# ---------- Shared tasks ----------
	def add_room_task(self, room_id: str, user_id: str, text: str) -> dict:
		self._member_room(room_id, user_id)
		profile = user_service.find_profile(user_id)
		ref = self._tasks(room_id).document()
		task = {
			"text": require_text(text, "text", 200),
			"completed": False,
			"addedBy": user_id,
			"addedByName": _display_name(profile, "Guest"),
			"createdAt": utc_now(),
		}
		ref.set(task)
		return {"id": ref.id, **task}

	def _task_ref(self, room_id: str, task_id: str):
		ref = self._tasks(room_id).document(task_id)
		if not ref.get().exists:
			raise NotFoundError("Task not found")
		return ref

	def toggle_room_task(self, room_id: str, user_id: str, task_id: str, completed: bool) -> None:
		self._member_room(room_id, user_id)
		self._task_ref(room_id, task_id).update({"completed": bool(completed)})

	def delete_room_task(self, room_id: str, user_id: str, task_id: str) -> None:
		self._member_room(room_id, user_id)
		self._task_ref(room_id, task_id).delete()

	def list_room_tasks(self, room_id: str, user_id: str | None = None) -> list[dict]:
		if user_id is not None:
			self._member_room(room_id, user_id)
		snaps = self._tasks(room_id).order_by("createdAt").get()
		return [{"id": s.id, **(s.to_dict() or {})} for s in snaps]

	# ---------- Chat ----------
	def send_message(self, room_id: str, user_id: str, text: str) -> dict:
		room = self._member_room(room_id, user_id)
		member = next((m for m in room.get("members", []) if m.get("uid") == user_id), {})
		ref = self._messages(room_id).document()
		message = {
			"senderId": user_id,
			"senderName": member.get("name") or "Guest",
			"text": require_text(text, "text", 1000),
			"createdAt": utc_now(),
		}
		ref.set(message)
		return {"id": ref.id, **message}

	def send_system_message(self, room_id: str, text: str) -> None:
		self._messages(room_id).document().set({
			"senderId": SYSTEM_SENDER,
			"senderName": "System",
			"text": text,
			"isSystem": True,
			"createdAt": utc_now(),
		})

	def list_messages(self, room_id: str, user_id: str | None = None) -> list[dict]:
		if user_id is not None:
			self._member_room(room_id, user_id)
		messages = [{"id": s.id, **(s.to_dict() or {})} for s in self._messages(room_id).get()]
		# Stable sort; messages still missing a timestamp keep their position at the end
		messages.sort(key=lambda m: (m.get("createdAt") is None, m.get("createdAt") or 0))
		return messages

	# ---------- Real-time ----------
	def room_events(self, room_id: str):
		"""Return an iterator of ``(event, payload)`` pairs, one per change to the room.

		The room is looked up eagerly so a missing room fails before streaming starts.
		"""
		self.get_room(room_id)
		return self._watch_room(room_id)

	def _watch_room(self, room_id: str):
		ref = self._rooms().document(room_id)
		for snapshots in firebase_service.watch(ref):
			if snapshots is None:
				yield "ping", {}
				continue
			snap = snapshots[0] if snapshots else None
			if snap is None or not snap.exists or (snap.to_dict() or {}).get("active") is False:
				yield "deleted", {"id": room_id}
				return
			room = snap.to_dict() or {}
			yield "room", {**room, "remaining": remaining_seconds(room)}


room_service = RoomService()
