from datetime import timedelta

import pytest

from streakify.utils.helpers import utc_now
from tests.conftest import auth


@pytest.fixture
def users(make_user):
	today = utc_now()
	make_user("ana", streakCount=12, productivityScore=300, lastSubmission=today)
	make_user("ben", streakCount=30, productivityScore=120, lastSubmission=today)
	make_user("cy", streakCount=12, productivityScore=900, lastSubmission=today)
	make_user("dee", streakCount=2, productivityScore=50, lastSubmission=today)


def test_streak_leaderboard_orders_by_streak(client, users):
	rows = client.get("/api/leaderboard/streaks").get_json()
	assert [r["uid"] for r in rows][0] == "ben"
	assert [r["streakCount"] for r in rows] == [30, 12, 12, 2]
	assert [r["rank"] for r in rows] == [1, 2, 3, 4]
	assert set(rows[0]) == {"rank", "uid", "name", "username", "photoURL", "streakCount", "productivityScore"}


def test_score_leaderboard_with_limit(client, users):
	rows = client.get("/api/leaderboard/scores?limit=2").get_json()
	assert [r["uid"] for r in rows] == ["cy", "ana"]


def test_rank_shares_ties_and_reports_gap(client, users):
	data = client.get("/api/leaderboard/rank", headers=auth("ana")).get_json()
	assert data == {"metric": "streak", "currentRank": 2, "totalUsers": 4, "value": 12, "toNextRank": 18}

	data = client.get("/api/leaderboard/rank?metric=score", headers=auth("dee")).get_json()
	assert data["currentRank"] == 4
	assert data["toNextRank"] == 70


def test_rank_top_has_no_gap(client, users):
	assert client.get("/api/leaderboard/rank", headers=auth("ben")).get_json()["toNextRank"] == 0


def test_unknown_metric(client, users):
	assert client.get("/api/leaderboard/rank?metric=karma", headers=auth("ana")).status_code == 400


def test_broken_streaks_drop_off_the_board(client, make_user):
	make_user("old", streakCount=100, lastSubmission=utc_now() - timedelta(days=10))
	make_user("live", streakCount=3, lastSubmission=utc_now() - timedelta(days=1))
	rows = client.get("/api/leaderboard/streaks").get_json()
	assert [(r["uid"], r["streakCount"]) for r in rows] == [("live", 3), ("old", 0)]

	data = client.get("/api/leaderboard/rank", headers=auth("old")).get_json()
	assert data["currentRank"] == 2
	assert data["value"] == 0
	assert data["toNextRank"] == 3
	assert client.get("/api/streak/status", headers=auth("old")).get_json()["currentStreak"] == 0
