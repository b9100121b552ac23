from flask import Blueprint, jsonify

from streakify.config import Config
from streakify.services.firebase_service import firebase_service
from streakify.services.user_service import user_service
from streakify.utils.decorators import current_uid
from streakify.utils.helpers import get_json, require_text, serialize


bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.post("/signup")
def signup():
	body = get_json(["email", "password", "name", "username"])
	name = require_text(body["name"], "name", 80)
	username = require_text(body["username"], "username", 40)
	uid = firebase_service.create_auth_user(email=body["email"], password=body["password"], name=name)
	profile = user_service.create_profile(uid, name=name, username=username, email=body["email"])
	token = firebase_service.create_custom_token(uid)
	return jsonify({"userId": uid, "token": token, "user": serialize(profile)}), 201


@bp.post("/login")
def login():
	body = get_json(["email", "password"])
	result = firebase_service.login_with_password(body["email"], body["password"])
	result["user"] = serialize(user_service.find_profile(result["userId"]))
	return jsonify(result), 200


@bp.post("/profile")
def ensure_profile():
	# Sign-ups done with the client SDK land here to seed their profile
	uid = current_uid()
	body = get_json(["name", "username", "email"])
	profile = user_service.create_profile(
		uid,
		name=require_text(body["name"], "name", 80),
		username=require_text(body["username"], "username", 40),
		email=body["email"],
	)
	return jsonify(serialize(profile)), 200


@bp.get("/verify")
def verify():
	return jsonify({"valid": bool(current_uid())}), 200


@bp.post("/logout")
def logout():
	# Stateless ID tokens; revoking refresh tokens signs the user out everywhere
	uid = current_uid(optional=True)
	if uid and not Config.DEMO_MODE:
		firebase_service.revoke_refresh_tokens(uid)
	return jsonify({"success": True}), 200
