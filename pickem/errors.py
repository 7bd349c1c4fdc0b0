from flask import jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError as SchemaValidationError
import logging

from utils.exceptions import PickemError

logger = logging.getLogger(__name__)


def error_response(message: str | None, status: int, details: dict | None = None):
    """{errorStatus, errorMessage} envelope; an empty object when there is no message."""
    if message is None:
        return jsonify({}), status
    payload = {"errorStatus": status, "errorMessage": message}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    @app.errorhandler(PickemError)
    def handle_pickem_error(err: PickemError):
        if err.status_code >= 500:
            logger.error("%s (cause: %r)", err.__class__.__name__, err.__cause__, exc_info=err)
        else:
            logger.info("%s: %s", err.__class__.__name__, err.message or "-")
        return error_response(err.message, err.status_code)

    # Marshmallow validation errors map to 400
    @app.errorhandler(SchemaValidationError)
    def handle_validation_error(err: SchemaValidationError):
        # err.messages contains field-level details
        logger.info("Invalid input: %s", err.messages)
        details = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        return error_response("Invalid input", 400, details=details)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.description, err.code or 400)

    # 500 Internal Error (catch-all), the service keeps running
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return error_response("An unexpected error occurred", 500)
