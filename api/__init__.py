import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from models.credential_store import CredentialStore
from models.refresh_token_store import RefreshTokenStore
from utils.login import LoginService
from utils.middleware import AuthenticationMiddleware
from utils.security import configure_hasher
from utils.tokens import TokenService

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Vehicle Management API",
        "version": "1.0.0",
        "description": "REST API for managing vehicles and clients behind bearer-token authentication.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

DEFAULT_JWT_SECRET = "dev-secret-change-me-to-32-bytes-or-more"


def init_auth(app: Flask, clock=None) -> LoginService:
    """
    Build the auth stack for this app: stores, token service, login service and
    the per-request authentication hook.
    """
    configure_hasher(app.config.get("ARGON2_TIME_COST"), app.config.get("ARGON2_MEMORY_COST"))

    credential_store = CredentialStore(storage)
    refresh_store = RefreshTokenStore(storage)
    token_service = TokenService.from_config(app.config, refresh_store, credential_store, clock=clock)
    login_service = LoginService(credential_store, token_service)

    app.extensions["login_service"] = login_service
    AuthenticationMiddleware(token_service, credential_store).init_app(app)
    return login_service


def create_app(config_name: str | None = None, clock=None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `clock` overrides the token service's notion of "now" (tests).
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))

    if not (app.debug or app.testing) and app.config["JWT_SECRET"] == DEFAULT_JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set in production")

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    for name in ("api", "utils", "models"):
        logging.getLogger(name).setLevel(app.config["LOG_LEVEL"])

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    init_auth(app, clock=clock)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .clients import bp as clients_bp
    from .vehicles import bp as vehicles_bp
    from .commands import register_commands

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(clients_bp, url_prefix="/api/v1/admin/clients")
    app.register_blueprint(vehicles_bp, url_prefix="/api/v1")
    register_commands(app)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # Calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Vehicle Management API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
