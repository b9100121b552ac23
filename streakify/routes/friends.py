from flask import Blueprint, jsonify, g

from streakify.services.friend_service import friend_service
from streakify.utils.decorators import auth_required
from streakify.utils.helpers import get_json, serialize


bp = Blueprint("friends", __name__, url_prefix="/api/friends")


@bp.get("")
@auth_required
def friends_list():
	return jsonify(serialize(friend_service.get_friends_list(g.user_id))), 200


@bp.get("/friendships")
@auth_required
def friendships():
	return jsonify(serialize(friend_service.list_friendships(g.user_id))), 200


@bp.post("/friendships")
@auth_required
def start_friendship():
	body = get_json(["userId"])
	friendship_id = friend_service.create_friendship(g.user_id, body["userId"])
	return jsonify({"id": friendship_id}), 201


@bp.get("/requests")
@auth_required
def requests_list():
	return jsonify(serialize(friend_service.list_friend_requests(g.user_id))), 200


@bp.post("/requests")
@auth_required
def send_request():
	body = get_json(["toId"])
	request_id = friend_service.send_friend_request(g.user_id, body["toId"])
	return jsonify({"id": request_id}), 201


@bp.post("/requests/<request_id>/accept")
@auth_required
def accept(request_id: str):
	friend_service.accept_friend_request(request_id, g.user_id)
	return jsonify({"success": True}), 200


@bp.post("/requests/<request_id>/reject")
@auth_required
def reject(request_id: str):
	friend_service.reject_friend_request(request_id, g.user_id)
	return jsonify({"success": True}), 200
