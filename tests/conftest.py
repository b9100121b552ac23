"""Pytest configuration and shared fixtures.

Firestore is replaced by ``tests.fakes.FakeFirestore`` and requests authenticate
with the ``Demo <uid>`` header, so nothing here talks to Firebase.
"""

import pytest

from streakify.app import create_app
from streakify.config import Config
from streakify.services.firebase_service import firebase_service
from streakify.services.user_service import user_service
from tests.fakes import FakeFirestore


@pytest.fixture
def fake_db(monkeypatch) -> FakeFirestore:
	db = FakeFirestore()
	monkeypatch.setattr(firebase_service, "db", db)
	monkeypatch.setattr(firebase_service, "_initialized", True)
	monkeypatch.setattr(Config, "DEMO_MODE", True)
	monkeypatch.setattr(Config, "STREAK_TIMEZONE", "UTC")
	return db


@pytest.fixture
def app(fake_db):
	app = create_app()
	app.config.update(TESTING=True)
	return app


@pytest.fixture
def client(app):
	return app.test_client()


@pytest.fixture
def make_user(fake_db):
	"""Seed a profile; extra keyword arguments overwrite stored fields."""

	def _make(uid: str, name: str | None = None, **fields) -> dict:
		name = name or uid.title()
		user_service.create_profile(uid, name=name, username=uid, email=f"{uid}@example.com")
		if fields:
			fake_db.collection("users").document(uid).set(fields, merge=True)
		return user_service.get_profile(uid)

	return _make


def auth(uid: str) -> dict:
	return {"Authorization": f"Demo {uid}"}
