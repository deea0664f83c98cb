"""
Request hooks applied to every API blueprint:
- request timing log
- success envelope {"data": ..., "statusCode": ...}
"""
import logging
import time

from flask import current_app, g, request

logger = logging.getLogger(__name__)

# Blueprints whose JSON is served as-is (swagger spec, etc.)
PASSTHROUGH_BLUEPRINTS = {"flasgger"}


def _should_transform(response) -> bool:
    if request.blueprint is None or request.blueprint in PASSTHROUGH_BLUEPRINTS:
        return False
    return response.status_code < 400 and response.is_json


def register_interceptors(app):
    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()
        logger.debug("Before... %s %s", request.method, request.path)

    @app.after_request
    def transform_response(response):
        if _should_transform(response):
            body = response.get_json(silent=True)
            response.set_data(current_app.json.dumps({"data": body, "statusCode": response.status_code}))
        return response

    @app.after_request
    def log_request(response):
        started = g.pop("request_started", None)
        elapsed_ms = int((time.perf_counter() - started) * 1000) if started is not None else 0
        logger.info("%s %s -> %s After... %dms", request.method, request.path, response.status_code, elapsed_ms)
        return response
