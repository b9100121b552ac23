from flask import Blueprint, jsonify, g

from streakify.services.task_service import task_service
from streakify.utils.decorators import auth_required
from streakify.utils.helpers import get_json, serialize


bp = Blueprint("tasks", __name__, url_prefix="/api/tasks")


@bp.get("")
@auth_required
def list_tasks():
	return jsonify(serialize(task_service.list_tasks(g.user_id))), 200


@bp.post("")
@auth_required
def add_task():
	body = get_json(["text"])
	return jsonify(serialize(task_service.add_task(g.user_id, body["text"]))), 201


@bp.post("/<task_id>/toggle")
@auth_required
def toggle_task(task_id: str):
	return jsonify(serialize(task_service.toggle_task(task_id, g.user_id))), 200


@bp.delete("/<task_id>")
@auth_required
def delete_task(task_id: str):
	task_service.delete_task(task_id, g.user_id)
	return jsonify({"success": True}), 200
