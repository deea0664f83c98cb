import logging

from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError

from models.errors import StoreError
from services.errors import ServiceError

logger = logging.getLogger(__name__)


def error_response(error: str, message: str, status: int, details=None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # Domain errors carry their own kind and status
    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        logger.info("%s: %s", err.kind.value, err.message)
        public_kind = err.public_kind or err.kind
        message = err.public_message or err.message
        return error_response(public_kind.value, message, err.status, details=err.details)

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return error_response("VALIDATION_ERROR", "Invalid input", 422, details=err.messages)

    # Unclassified persistence failures; never echo driver detail to the client
    @app.errorhandler(StoreError)
    def handle_store_error(err: StoreError):
        logger.exception("Store failure", exc_info=err)
        details = None
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("STORE_ERROR", "A storage error occurred", 500, details=details)

    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", 404)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        code = err.code or 400
        name = (err.name or "Bad Request").upper().replace(" ", "_")
        return error_response(name, err.description, code)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        details = None
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
