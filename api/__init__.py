from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import AuthSettings, check_config, get_config
from .errors import register_error_handlers
from .interceptors import register_interceptors
from .observability import configure_logging, init_sentry

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Posts API",
        "version": "1.0.0",
        "description": "REST API for posts with access/refresh token authentication.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        },
        "ApiKey": {
            "type": "apiKey",
            "name": "x-api-key",
            "in": "header",
        },
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

API_PREFIX = "/api/v1"


def create_app(config_name: str | None = None, **overrides) -> Flask:
    """
    Application factory: builds the app and wires its collaborators
    explicitly (storage -> hashing/tokens -> services -> guards).
    `overrides` are applied on top of the selected config class.
    """
    app = Flask(__name__)

    config = get_config(config_name)
    check_config(config)
    app.config.from_object(config)
    app.config.update(overrides)

    configure_logging(app)
    init_sentry(app)

    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Collaborators, built once per app and passed by reference
    from models.db_storage import DBStorage
    from services.auth import AuthService
    from services.posts import PostsService
    from utils.decorators import install_guards
    from utils.guards import GuardComposer
    from utils.hashing import HashingService
    from utils.tokens import TokenService

    settings = AuthSettings.from_mapping(app.config)
    storage = DBStorage.from_config(app.config)
    storage.reload()
    tokens = TokenService(settings)
    hashing = HashingService.from_config(app.config)

    app.extensions["storage"] = storage
    app.extensions["auth_service"] = AuthService(storage, hashing, tokens)
    app.extensions["posts_service"] = PostsService(storage)

    register_interceptors(app)
    install_guards(app, GuardComposer(tokens, settings.api_key))
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .posts import bp as posts_bp

    prefix = app.config.get("API_PREFIX", API_PREFIX)
    app.register_blueprint(health_bp, url_prefix=prefix)
    app.register_blueprint(auth_bp, url_prefix=f"{prefix}/auth")
    app.register_blueprint(posts_bp, url_prefix=prefix)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Posts API",
            "docs": "/apidocs/",
            "health": f"{prefix}/health",
        }, 200

    return app
