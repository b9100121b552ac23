import json

from flask import Blueprint, Response, jsonify, g, stream_with_context

from streakify.services.room_service import DEFAULT_DURATION, remaining_seconds, room_service
from streakify.utils.decorators import auth_required
from streakify.utils.helpers import get_json, serialize


bp = Blueprint("rooms", __name__, url_prefix="/api/rooms")


def _with_timer(room: dict) -> dict:
	return serialize({**room, "remaining": remaining_seconds(room)})


@bp.post("")
@auth_required
def create_room():
	room = room_service.create_room(g.user_id, get_json().get("name", ""))
	return jsonify(_with_timer(room)), 201


@bp.get("/mine")
@auth_required
def my_rooms():
	return jsonify([_with_timer(r) for r in room_service.list_user_rooms(g.user_id)]), 200


@bp.get("/<room_id>")
@auth_required
def get_room(room_id: str):
	return jsonify(_with_timer(room_service.get_room(room_id))), 200


@bp.delete("/<room_id>")
@auth_required
def delete_room(room_id: str):
	room_service.delete_room(room_id, g.user_id)
	return jsonify({"success": True}), 200


@bp.post("/<room_id>/join")
@auth_required
def join(room_id: str):
	return jsonify(_with_timer(room_service.join_room(room_id, g.user_id))), 200


@bp.post("/<room_id>/leave")
@auth_required
def leave(room_id: str):
	room_service.leave_room(room_id, g.user_id)
	return jsonify({"success": True}), 200


@bp.put("/<room_id>/status")
@auth_required
def timer(room_id: str):
	body = get_json(["status"])
	room = room_service.update_room_status(room_id, g.user_id, body["status"], body.get("duration", DEFAULT_DURATION))
	return jsonify(_with_timer(room)), 200


@bp.put("/<room_id>/me")
@auth_required
def member_status(room_id: str):
	body = get_json(["currentTask"])
	room = room_service.update_member_status(room_id, g.user_id, body["currentTask"])
	return jsonify(_with_timer(room)), 200


@bp.get("/<room_id>/messages")
@auth_required
def messages(room_id: str):
	return jsonify(serialize(room_service.list_messages(room_id, g.user_id))), 200


@bp.post("/<room_id>/messages")
@auth_required
def send_message(room_id: str):
	body = get_json(["text"])
	return jsonify(serialize(room_service.send_message(room_id, g.user_id, body["text"]))), 201


@bp.get("/<room_id>/tasks")
@auth_required
def tasks(room_id: str):
	return jsonify(serialize(room_service.list_room_tasks(room_id, g.user_id))), 200


@bp.post("/<room_id>/tasks")
@auth_required
def add_task(room_id: str):
	body = get_json(["text"])
	return jsonify(serialize(room_service.add_room_task(room_id, g.user_id, body["text"]))), 201


@bp.put("/<room_id>/tasks/<task_id>")
@auth_required
def toggle_task(room_id: str, task_id: str):
	body = get_json(["completed"])
	room_service.toggle_room_task(room_id, g.user_id, task_id, body["completed"])
	return jsonify({"success": True}), 200


@bp.delete("/<room_id>/tasks/<task_id>")
@auth_required
def delete_task(room_id: str, task_id: str):
	room_service.delete_room_task(room_id, g.user_id, task_id)
	return jsonify({"success": True}), 200


@bp.get("/<room_id>/stream")
@auth_required
def stream(room_id: str):
	events = room_service.room_events(room_id)

	def generate():
		for event, payload in events:
			if event == "ping":
				yield ": keep-alive\n\n"
				continue
			yield f"event: {event}\ndata: {json.dumps(serialize(payload))}\n\n"

	return Response(
		stream_with_context(generate()),
		mimetype="text/event-stream",
		headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
	)
