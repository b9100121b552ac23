import os


class Config:

	SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_key")
	ENV = os.getenv("FLASK_ENV", "production")
	DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"
	FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
	PORT = int(os.getenv("PORT", "5000"))
	LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

	FIREBASE_CREDENTIALS_PATH = os.getenv(
		"FIREBASE_CREDENTIALS_PATH", "./firebase-credentials.json"
	)
	FIREBASE_WEB_API_KEY = os.getenv("FIREBASE_WEB_API_KEY", "")
	DEMO_MODE = os.getenv("DEMO_MODE", "False").lower() == "true"

	# Calendar days for streaks are counted in this zone
	STREAK_TIMEZONE = os.getenv("STREAK_TIMEZONE", "UTC")

	# Firestore caps a document at 1 MiB; proofs are stored inline
	MAX_PROOF_BYTES = int(os.getenv("MAX_PROOF_BYTES", str(900 * 1024)))
	MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

	CORS_RESOURCES = {r"/api/*": {"origins": [FRONTEND_URL]}}
	CORS_SUPPORTS_CREDENTIALS = True
	CORS_ALLOW_HEADERS = [
		"Content-Type",
		"Authorization",
		"X-Requested-With",
	]
