from flask import Blueprint, jsonify, g, request

from streakify.services.friend_service import friend_service
from streakify.services.log_service import log_service
from streakify.services.streak_service import streak_service
from streakify.services.user_service import user_service
from streakify.utils.decorators import auth_required
from streakify.utils.helpers import local_date, serialize, utc_now


bp = Blueprint("streak", __name__, url_prefix="/api/streak")


def _month_args() -> tuple[int, int]:
	today = local_date(utc_now())
	return request.args.get("year", today.year, type=int), request.args.get("month", today.month, type=int)


@bp.get("/status")
@auth_required
def status():
	user = user_service.get_profile(g.user_id)
	last = user.get("lastSubmission")
	now = utc_now()
	return jsonify(serialize({
		"currentStreak": streak_service.displayed_count(last, now, user.get("streakCount")),
		"longestStreak": user.get("longestStreak", 0),
		"lastCompletedDate": last,
		"loggedToday": log_service.get_todays_log(g.user_id) is not None,
		"daysUntilBreak": streak_service.days_until_break(last, now),
	})), 200


@bp.get("/calendar")
@auth_required
def calendar():
	year, month = _month_args()
	logs = log_service.list_user_logs(request.args.get("uid") or g.user_id)
	return jsonify(log_service.calendar(logs, year, month)), 200


@bp.get("/friendships/<friendship_id>")
@auth_required
def friendship(friendship_id: str):
	data = friend_service.get_friendship(friendship_id, g.user_id)
	now = utc_now()
	data["activeStreak"] = streak_service.displayed_count(data.get("lastLogDate"), now, data.get("streakCount"))
	data["daysUntilBreak"] = streak_service.days_until_break(data.get("lastLogDate"), now)
	return jsonify(serialize(data)), 200


@bp.get("/friendships/<friendship_id>/calendar")
@auth_required
def friendship_calendar(friendship_id: str):
	year, month = _month_args()
	logs = log_service.list_friendship_logs(friendship_id, g.user_id)
	return jsonify(log_service.calendar(logs, year, month)), 200
