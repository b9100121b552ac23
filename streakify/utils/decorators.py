from functools import wraps

from flask import request, g

from streakify.config import Config
from streakify.services.firebase_service import firebase_service
from streakify.utils.errors import AuthError


def _uid_from_header(header: str) -> str:
	if header.startswith("Bearer "):
		token = header.split(" ", 1)[1].strip()
		return firebase_service.verify_id_token(token)
	# Local development skips Firebase Auth entirely
	if Config.DEMO_MODE and header.startswith("Demo "):
		uid = header.split(" ", 1)[1].strip()
		if uid:
			return uid
	raise AuthError("Missing or invalid Authorization header")


def current_uid(optional: bool = False) -> str | None:
	header = request.headers.get("Authorization", "")
	if optional and not header:
		return None
	return _uid_from_header(header)


def auth_required(fn):
	@wraps(fn)
	def wrapper(*args, **kwargs):
		g.user_id = current_uid()
		return fn(*args, **kwargs)

	return wrapper
