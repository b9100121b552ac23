from datetime import timedelta

from streakify.utils.helpers import utc_now
from tests.conftest import auth


def test_add_toggle_delete(client, make_user, fake_db):
	make_user("alice")
	resp = client.post("/api/tasks", json={"text": "Review PR"}, headers=auth("alice"))
	assert resp.status_code == 201
	task = resp.get_json()
	assert task["completed"] is False
	assert fake_db.raw("tasks", task["id"])["userId"] == "alice"

	toggled = client.post(f"/api/tasks/{task['id']}/toggle", headers=auth("alice")).get_json()
	assert toggled["completed"] is True
	toggled = client.post(f"/api/tasks/{task['id']}/toggle", headers=auth("alice")).get_json()
	assert toggled["completed"] is False

	assert client.delete(f"/api/tasks/{task['id']}", headers=auth("alice")).status_code == 200
	assert fake_db.raw("tasks", task["id"]) is None


def test_list_is_newest_first_and_private(client, make_user, fake_db):
	make_user("alice")
	make_user("bob")
	fake_db.collection("tasks").document("t-old").set({
		"id": "t-old", "userId": "alice", "text": "Old", "completed": False, "createdAt": utc_now() - timedelta(days=1),
	})
	client.post("/api/tasks", json={"text": "New"}, headers=auth("alice"))
	client.post("/api/tasks", json={"text": "Bob's"}, headers=auth("bob"))

	texts = [t["text"] for t in client.get("/api/tasks", headers=auth("alice")).get_json()]
	assert texts == ["New", "Old"]


def test_cannot_touch_someone_elses_task(client, make_user):
	make_user("alice")
	make_user("bob")
	task_id = client.post("/api/tasks", json={"text": "Mine"}, headers=auth("alice")).get_json()["id"]
	assert client.post(f"/api/tasks/{task_id}/toggle", headers=auth("bob")).status_code == 403
	assert client.delete(f"/api/tasks/{task_id}", headers=auth("bob")).status_code == 403
	assert client.delete("/api/tasks/missing", headers=auth("bob")).status_code == 404


def test_text_required(client, make_user):
	make_user("alice")
	assert client.post("/api/tasks", json={"text": ""}, headers=auth("alice")).status_code == 400
	assert client.post("/api/tasks", json={}, headers=auth("alice")).status_code == 400
