from datetime import timedelta

import pytest

from streakify.services.friend_service import friend_service
from streakify.utils.errors import APIError, ForbiddenError
from streakify.utils.helpers import utc_now
from tests.conftest import auth


@pytest.fixture
def pair(make_user):
	make_user("alice", "Alice", photoURL="a.png")
	make_user("bob", "Bob")
	return "alice", "bob"


class TestFriendships:

	def test_create_copies_member_cards(self, client, pair, fake_db):
		resp = client.post("/api/friends/friendships", json={"userId": "bob"}, headers=auth("alice"))
		assert resp.status_code == 201
		stored = fake_db.raw("friendships", resp.get_json()["id"])
		assert stored["members"] == ["alice", "bob"]
		assert stored["memberData"]["alice"] == {"name": "Alice", "photo": "a.png"}
		assert stored["memberData"]["bob"] == {"name": "Bob", "photo": ""}
		assert stored["streakCount"] == 0
		assert stored["lastLogDate"] is None

	def test_create_is_idempotent_in_either_direction(self, pair):
		first = friend_service.create_friendship("alice", "bob")
		assert friend_service.create_friendship("alice", "bob") == first
		assert friend_service.create_friendship("bob", "alice") == first

	def test_cannot_befriend_self(self, pair):
		with pytest.raises(APIError):
			friend_service.create_friendship("alice", "alice")

	def test_listed_for_both_members(self, client, pair):
		friend_service.create_friendship("alice", "bob")
		for uid in pair:
			rows = client.get("/api/friends/friendships", headers=auth(uid)).get_json()
			assert len(rows) == 1
			assert rows[0]["activeStreak"] == 0

	def test_outsiders_cannot_read(self, client, pair, make_user):
		make_user("carol")
		friendship_id = friend_service.create_friendship("alice", "bob")
		assert client.get(f"/api/streak/friendships/{friendship_id}", headers=auth("carol")).status_code == 403
		assert client.get(f"/api/streak/friendships/{friendship_id}", headers=auth("bob")).status_code == 200


class TestFriendshipStreak:

	def test_shared_log_starts_streak_once_per_day(self, client, pair, fake_db):
		friendship_id = friend_service.create_friendship("alice", "bob")
		body = {"title": "Run", "friendshipId": friendship_id}
		assert client.post("/api/logs", json=body, headers=auth("alice")).get_json()["friendshipStreak"] == 1
		assert client.post("/api/logs", json=body, headers=auth("bob")).get_json()["friendshipStreak"] == 1
		assert fake_db.raw("friendships", friendship_id)["streakCount"] == 1

	def test_consecutive_day_increments_and_gap_resets(self, pair, fake_db):
		friendship_id = friend_service.create_friendship("alice", "bob")
		ref = fake_db.collection("friendships").document(friendship_id)

		ref.update({"streakCount": 3, "lastLogDate": utc_now() - timedelta(days=1)})
		assert friend_service.update_friendship_streak(friendship_id).count == 4

		ref.update({"streakCount": 8, "lastLogDate": utc_now() - timedelta(days=4)})
		assert friend_service.update_friendship_streak(friendship_id).count == 1

	def test_non_member_cannot_log_into_friendship(self, client, pair, make_user):
		make_user("carol")
		friendship_id = friend_service.create_friendship("alice", "bob")
		resp = client.post("/api/logs", json={"title": "x", "friendshipId": friendship_id}, headers=auth("carol"))
		assert resp.status_code == 403

	def test_friendship_logs_and_calendar(self, client, pair):
		friendship_id = friend_service.create_friendship("alice", "bob")
		client.post("/api/logs", json={"title": "Solo"}, headers=auth("alice"))
		client.post("/api/logs", json={"title": "Shared", "friendshipId": friendship_id}, headers=auth("bob"))
		today = utc_now()
		cal = client.get(
			f"/api/streak/friendships/{friendship_id}/calendar?year={today.year}&month={today.month}",
			headers=auth("alice"),
		).get_json()
		assert cal["activeDays"] == [today.day]


class TestFriendRequests:

	def test_send_accept_flow(self, client, pair, fake_db):
		resp = client.post("/api/friends/requests", json={"toId": "bob"}, headers=auth("alice"))
		assert resp.status_code == 201
		request_id = resp.get_json()["id"]

		pending = client.get("/api/friends/requests", headers=auth("bob")).get_json()
		assert [r["fromName"] for r in pending] == ["Alice"]

		assert client.post(f"/api/friends/requests/{request_id}/accept", headers=auth("bob")).status_code == 200
		assert fake_db.raw("friendRequests", request_id)["status"] == "accepted"
		assert fake_db.raw("users", "alice")["friends"] == ["bob"]
		assert fake_db.raw("users", "bob")["friends"] == ["alice"]
		assert client.get("/api/friends/requests", headers=auth("bob")).get_json() == []

		names = [f["name"] for f in client.get("/api/friends", headers=auth("alice")).get_json()]
		assert names == ["Bob"]

	def test_duplicate_pending_request_rejected(self, client, pair):
		client.post("/api/friends/requests", json={"toId": "bob"}, headers=auth("alice"))
		resp = client.post("/api/friends/requests", json={"toId": "bob"}, headers=auth("alice"))
		assert resp.status_code == 409

	def test_only_addressee_can_accept(self, pair):
		request_id = friend_service.send_friend_request("alice", "bob")
		with pytest.raises(ForbiddenError):
			friend_service.accept_friend_request(request_id, "alice")

	def test_accept_with_missing_sender_can_be_retried(self, client, pair, fake_db):
		request_id = friend_service.send_friend_request("alice", "bob")
		fake_db.collection("users").document("alice").delete()
		assert client.post(f"/api/friends/requests/{request_id}/accept", headers=auth("bob")).status_code == 404
		assert fake_db.raw("friendRequests", request_id)["status"] == "pending"
		assert fake_db.raw("users", "bob")["friends"] == []

	def test_reject_marks_request(self, client, pair, fake_db):
		request_id = friend_service.send_friend_request("alice", "bob")
		assert client.post(f"/api/friends/requests/{request_id}/reject", headers=auth("bob")).status_code == 200
		assert fake_db.raw("friendRequests", request_id)["status"] == "rejected"
		assert client.post(f"/api/friends/requests/{request_id}/accept", headers=auth("bob")).status_code == 409

	def test_friends_list_fetches_beyond_ten(self, make_user, fake_db):
		make_user("alice")
		ids = [f"user{i:02d}" for i in range(13)]
		for uid in ids:
			make_user(uid)
		fake_db.collection("users").document("alice").update({"friends": ids})
		friends = friend_service.get_friends_list("alice")
		assert sorted(f["uid"] for f in friends) == ids
