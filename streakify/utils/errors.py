import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException


logger = logging.getLogger(__name__)


class APIError(Exception):

	status_code = 400

	def __init__(self, message: str, status_code: int | None = None):
		super().__init__(message)
		if status_code is not None:
			self.status_code = status_code
		self.message = message


class AuthError(APIError):

	status_code = 401


class ForbiddenError(APIError):

	status_code = 403


class NotFoundError(APIError):

	status_code = 404


def register_error_handlers(app):

	@app.errorhandler(APIError)
	def handle_api_error(err: APIError):
		if err.status_code >= 500:
			logger.error("API error %s: %s", err.status_code, err.message, exc_info=err.__cause__)
		return jsonify({"error": err.message}), err.status_code

	@app.errorhandler(404)
	def handle_404(_):
		return jsonify({"error": "Not found"}), 404

	@app.errorhandler(405)
	def handle_405(_):
		return jsonify({"error": "Method not allowed"}), 405

	@app.errorhandler(413)
	def handle_413(_):
		return jsonify({"error": "Upload too large"}), 413

	@app.errorhandler(HTTPException)
	def handle_http_error(err: HTTPException):
		return jsonify({"error": err.description or err.name}), err.code

	@app.errorhandler(Exception)
	def handle_unexpected(err: Exception):
		logger.exception("Unhandled error: %s", err)
		return jsonify({"error": "Internal server error"}), 500
