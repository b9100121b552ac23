from flask import Blueprint, jsonify, g, request

from streakify.services.image_service import image_service
from streakify.services.log_service import log_service
from streakify.utils.decorators import auth_required
from streakify.utils.helpers import get_json, serialize


bp = Blueprint("logs", __name__, url_prefix="/api/logs")

DEFAULT_REACTION = "🔥"


@bp.post("")
@auth_required
def create_log():
	if request.files or request.form:
		body = request.form.to_dict()
		if "proof" in request.files:
			body["proofURL"] = image_service.process_upload(request.files["proof"])
	else:
		body = get_json(["title"])
	log = log_service.create_log(g.user_id, body)
	return jsonify(serialize(log)), 201


@bp.post("/proof")
@auth_required
def upload_proof():
	data_url = image_service.process_upload(request.files.get("proof"))
	return jsonify({"proofURL": data_url}), 200


@bp.get("/recent")
@auth_required
def recent():
	limit = request.args.get("limit", 20, type=int)
	return jsonify(serialize(log_service.get_recent_logs(min(max(limit, 1), 100)))), 200


@bp.get("/today")
@auth_required
def today():
	return jsonify(serialize({"log": log_service.get_todays_log(g.user_id)})), 200


@bp.get("/<log_id>")
@auth_required
def get_log(log_id: str):
	return jsonify(serialize(log_service.get_log(log_id))), 200


@bp.put("/<log_id>")
@auth_required
def update_log(log_id: str):
	log = log_service.update_log(log_id, g.user_id, get_json())
	return jsonify(serialize(log)), 200


@bp.delete("/<log_id>")
@auth_required
def delete_log(log_id: str):
	log_service.delete_log(log_id, g.user_id)
	return jsonify({"success": True}), 200


@bp.post("/<log_id>/reactions")
@auth_required
def react(log_id: str):
	reaction = get_json().get("reaction") or DEFAULT_REACTION
	reactions = log_service.toggle_reaction(log_id, g.user_id, reaction)
	return jsonify({"reactions": reactions, "count": len(reactions)}), 200
