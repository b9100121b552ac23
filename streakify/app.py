import logging

from flask import Flask
from flask_cors import CORS

from streakify.config import Config
from streakify.routes.auth import bp as auth_bp
from streakify.routes.friends import bp as friends_bp
from streakify.routes.leaderboard import bp as leaderboard_bp
from streakify.routes.logs import bp as logs_bp
from streakify.routes.rooms import bp as rooms_bp
from streakify.routes.streak import bp as streak_bp
from streakify.routes.tasks import bp as tasks_bp
from streakify.routes.user import bp as user_bp
from streakify.utils.errors import register_error_handlers


def configure_logging(level: str = Config.LOG_LEVEL) -> None:
	logging.basicConfig(
		level=getattr(logging, level, logging.INFO),
		format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
	)


def create_app(config: type = Config) -> Flask:
	configure_logging(config.LOG_LEVEL)

	app = Flask(__name__)
	app.config.from_object(config)
	app.json.ensure_ascii = False

	CORS(
		app,
		resources=config.CORS_RESOURCES,
		supports_credentials=config.CORS_SUPPORTS_CREDENTIALS,
		allow_headers=config.CORS_ALLOW_HEADERS,
	)

	# Register blueprints
	for bp in (auth_bp, user_bp, streak_bp, logs_bp, friends_bp, rooms_bp, tasks_bp, leaderboard_bp):
		app.register_blueprint(bp)

	register_error_handlers(app)

	@app.get("/health")
	def health() -> tuple[dict, int]:
		return {"status": "ok"}, 200

	return app


def main() -> None:
	create_app().run(host="0.0.0.0", port=Config.PORT, debug=Config.DEBUG)


if __name__ == "__main__":
	main()
