from __future__ import annotations

from google.cloud.firestore_v1 import FieldFilter

from streakify.services.firebase_service import Collections, firebase_service
from streakify.utils.errors import ForbiddenError, NotFoundError
from streakify.utils.helpers import require_text, utc_now


class TaskService:

	def _tasks(self):
		return firebase_service.collection(Collections.TASKS)

	def add_task(self, user_id: str, text: str) -> dict:
		ref = self._tasks().document()
		task = {
			"id": ref.id,
			"userId": user_id,
			"text": require_text(text, "text", 200),
			"completed": False,
			"createdAt": utc_now(),
		}
		ref.set(task)
		return task

	def _owned(self, task_id: str, user_id: str) -> dict:
		snap = self._tasks().document(task_id).get()
		if not snap.exists:
			raise NotFoundError("Task not found")
		task = snap.to_dict() or {}
		if task.get("userId") != user_id:
			raise ForbiddenError("Not your task")
		return task

	def toggle_task(self, task_id: str, user_id: str) -> dict:
		task = self._owned(task_id, user_id)
		completed = not task.get("completed", False)
		self._tasks().document(task_id).update({"completed": completed})
		return {**task, "completed": completed}

	def delete_task(self, task_id: str, user_id: str) -> None:
		self._owned(task_id, user_id)
		self._tasks().document(task_id).delete()

	def list_tasks(self, user_id: str) -> list[dict]:
		snaps = self._tasks().where(filter=FieldFilter("userId", "==", user_id)).get()
		tasks = [s.to_dict() for s in snaps]
		tasks.sort(key=lambda t: t.get("createdAt") or utc_now(), reverse=True)
		return tasks


task_service = TaskService()
