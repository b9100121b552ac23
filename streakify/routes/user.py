from flask import Blueprint, jsonify, g, request

from streakify.services.log_service import log_service
from streakify.services.user_service import user_service
from streakify.utils.decorators import auth_required
from streakify.utils.helpers import get_json, serialize


bp = Blueprint("user", __name__, url_prefix="/api/users")


@bp.get("/me")
@auth_required
def me():
	return jsonify(serialize(user_service.get_profile(g.user_id))), 200


@bp.put("/me")
@auth_required
def update_me():
	user = user_service.update_profile(g.user_id, get_json())
	return jsonify(serialize(user)), 200


@bp.get("/me/stats")
@auth_required
def stats():
	return jsonify(serialize(user_service.get_stats(g.user_id))), 200


@bp.get("/search")
@auth_required
def search():
	term = request.args.get("q", "").strip()
	return jsonify(serialize(user_service.search_users(term, exclude_uid=g.user_id))), 200


@bp.get("")
@auth_required
def list_users():
	limit = request.args.get("limit", 50, type=int)
	return jsonify(serialize(user_service.list_users(min(max(limit, 1), 100)))), 200


@bp.get("/<uid>")
@auth_required
def profile(uid: str):
	return jsonify(serialize(user_service.get_profile(uid))), 200


@bp.get("/<uid>/logs")
@auth_required
def user_logs(uid: str):
	return jsonify(serialize(log_service.list_user_logs(uid))), 200
