from flask import Blueprint, jsonify, g, request

from streakify.services.leaderboard_service import leaderboard_service
from streakify.utils.decorators import auth_required
from streakify.utils.errors import APIError


bp = Blueprint("leaderboard", __name__, url_prefix="/api/leaderboard")


def _limit() -> int:
	return min(max(request.args.get("limit", 50, type=int), 1), 100)


def _metric() -> str:
	metric = request.args.get("metric", "streak")
	if metric not in ("streak", "score"):
		raise APIError("metric must be 'streak' or 'score'", 400)
	return metric


@bp.get("/streaks")
def streaks():
	return jsonify(leaderboard_service.get_global_leaderboard(_limit())), 200


@bp.get("/scores")
def scores():
	return jsonify(leaderboard_service.get_top_scorers(_limit())), 200


@bp.get("/rank")
@auth_required
def rank():
	return jsonify(leaderboard_service.get_user_rank(g.user_id, _metric())), 200
