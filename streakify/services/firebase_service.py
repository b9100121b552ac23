from __future__ import annotations

import logging
import queue
from dataclasses import dataclass

import firebase_admin
import requests
from firebase_admin import credentials, firestore, auth as fb_auth

from streakify.config import Config
from streakify.utils.errors import APIError, AuthError


logger = logging.getLogger(__name__)

SIGN_IN_ENDPOINT = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"


@dataclass
class _Collections:
	USERS: str = "users"
	FRIENDSHIPS: str = "friendships"
	FRIEND_REQUESTS: str = "friendRequests"
	DAILY_LOGS: str = "dailyLogs"
	ROOMS: str = "rooms"
	MESSAGES: str = "messages"
	ROOM_TASKS: str = "tasks"
	TASKS: str = "tasks"


Collections = _Collections()


class FirebaseService:

	def __init__(self):
		self.db = None
		self._initialized = False
		self._firebase_web_api_key = Config.FIREBASE_WEB_API_KEY

	def _init_admin(self):
		if not firebase_admin._apps:  # type: ignore[attr-defined]
			try:
				cred = credentials.Certificate(Config.FIREBASE_CREDENTIALS_PATH)
				firebase_admin.initialize_app(cred)
			except Exception as e:
				raise APIError("Firebase credentials missing or invalid", 500) from e

	def _ensure_init(self):
		if not self._initialized:
			self._init_admin()
			self.db = firestore.client()
			self._initialized = True
			logger.info("Firestore client initialised")

	def use_client(self, client) -> None:
		"""Swap in an already-built Firestore client (emulator, tests)."""
		self.db = client
		self._initialized = True

	@property
	def client(self):
		self._ensure_init()
		return self.db

	def collection(self, name: str):
		return self.client.collection(name)

	# ---------- Auth ----------
	def create_auth_user(self, email: str, password: str, name: str) -> str:
		self._ensure_init()
		try:
			user = fb_auth.create_user(email=email, password=password, display_name=name)
		except fb_auth.EmailAlreadyExistsError as e:
			raise APIError("Email already registered", 409) from e
		except Exception as e:
			raise APIError("Failed to create user", 400) from e
		logger.info("Created auth user %s", user.uid)
		return user.uid

	def create_custom_token(self, uid: str) -> str:
		token = fb_auth.create_custom_token(uid)
		return token.decode() if isinstance(token, bytes) else token

	def login_with_password(self, email: str, password: str) -> dict:
		if not self._firebase_web_api_key:
			raise APIError("Login not configured on server. Use client SDK or set FIREBASE_WEB_API_KEY.", 501)
		try:
			resp = requests.post(
				SIGN_IN_ENDPOINT,
				params={"key": self._firebase_web_api_key},
				json={"email": email, "password": password, "returnSecureToken": True},
				timeout=10,
			)
		except requests.RequestException as e:
			raise APIError("Auth provider unreachable", 502) from e
		if resp.status_code != 200:
			raise AuthError("Invalid credentials")
		data = resp.json()
		return {"userId": data.get("localId"), "token": data.get("idToken"), "refreshToken": data.get("refreshToken")}

	def verify_id_token(self, token: str) -> str:
		self._ensure_init()
		try:
			decoded = fb_auth.verify_id_token(token)
		except Exception as e:
			raise AuthError("Unauthorized") from e
		uid = decoded.get("uid")
		if not uid:
			raise AuthError("Invalid token")
		return uid

	def revoke_refresh_tokens(self, uid: str) -> None:
		self._ensure_init()
		fb_auth.revoke_refresh_tokens(uid)

	# ---------- Real-time ----------
	def watch(self, ref, timeout: float = 30.0):
		"""Yield snapshots of ``ref`` as Firestore pushes them.

		Yields ``None`` when nothing arrived within ``timeout`` so callers can
		send keep-alives. The listener is torn down when the generator closes.
		"""
		events: queue.Queue = queue.Queue()

		def on_snapshot(snapshots, _changes, _read_time):
			events.put(snapshots)

		watch = ref.on_snapshot(on_snapshot)
		try:
			while True:
				try:
					yield events.get(timeout=timeout)
				except queue.Empty:
					yield None
		finally:
			watch.unsubscribe()


firebase_service = FirebaseService()
