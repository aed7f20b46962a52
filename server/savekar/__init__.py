# server/savekar/__init__.py

import os
import uuid
import logging
from datetime import datetime

from flask import Flask, jsonify, request, g
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from savekar.config import config_by_name
from savekar.errors import ServiceError
from savekar.extensions import db, migrate, cors, jwt, limiter
from savekar.utils.responses import ApiResponse

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "savekar-backend"
VERSION = "1.0.0"


def create_app(config_name=None):
    """Create and configure the Flask application"""
    config_name = config_name or os.environ.get("FLASK_ENV", "development")
    config_class = config_by_name.get(config_name, config_by_name["production"])

    app = Flask(__name__)
    app.config.from_object(config_class)
    app.api_response = ApiResponse()

    initialize_extensions(app)

    with app.app_context():
        initialize_database(app)

    register_middleware(app)
    register_blueprints(app)
    register_error_handlers(app)
    register_jwt_handlers(app)
    register_root_endpoints(app)

    logger.info(f"Application initialized in {app.config.get('FLASK_ENV', 'production')} mode")

    return app


def initialize_extensions(app):
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    cors_origins = list(dict.fromkeys(filter(None, app.config.get("CORS_ORIGINS", []))))
    cors.init_app(
        app,
        resources={r"/*": {"origins": cors_origins}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        max_age=3600,
    )

    logger.info(f"CORS initialized with origins: {cors_origins}")


def initialize_database(app):
    from savekar import models  # noqa: F401  registers tables

    try:
        db.create_all()
        logger.info("Database tables created/verified")
    except SQLAlchemyError as e:
        logger.error(f"Database initialization error: {e}", exc_info=True)
        if app.config.get("FLASK_ENV") == "production":
            raise


def register_middleware(app):

    @app.before_request
    def before_request():
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex

        if app.config.get("FLASK_ENV") == "development":
            logger.debug(f"{request.method} {request.path} from {request.remote_addr}")

    @app.after_request
    def after_request(response):
        """Add security headers to all responses"""
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if app.config.get("FLASK_ENV") == "production" and request.is_secure:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers["X-Request-ID"] = request_id

        return response


def register_blueprints(app):
    from savekar.routes import auth_bp, folders_bp, websites_bp, tags_bp, reminders_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(folders_bp, url_prefix="/folders")
    app.register_blueprint(websites_bp, url_prefix="/websites")
    app.register_blueprint(tags_bp, url_prefix="/tags")
    app.register_blueprint(reminders_bp, url_prefix="/reminders")

    logger.info("Blueprints registered: /auth, /folders, /websites, /tags, /reminders")


def register_error_handlers(app):
    api_response = app.api_response

    @app.errorhandler(ServiceError)
    def service_error(error):
        db.session.rollback()
        if error.status >= 500:
            logger.error(f"Service error: {error.message}")
        return api_response.error(error.message, error.status, error.code, error.data)

    @app.errorhandler(400)
    def bad_request(error):
        logger.warning(f"Bad request: {error}")
        return api_response.error(getattr(error, "description", None) or "Bad request", 400, "BAD_REQUEST")

    @app.errorhandler(401)
    def unauthorized(error):
        return api_response.error("Authentication required", 401, "UNAUTHORIZED")

    @app.errorhandler(404)
    def not_found(error):
        return api_response.error("The requested resource was not found", 404, "NOT_FOUND")

    @app.errorhandler(405)
    def method_not_allowed(error):
        return api_response.error(
            f"The {request.method} method is not allowed for this endpoint", 405, "METHOD_NOT_ALLOWED"
        )

    @app.errorhandler(429)
    def rate_limit_exceeded(error):
        return api_response.error("Rate limit exceeded. Please try again later", 429, "RATE_LIMITED")

    @app.errorhandler(HTTPException)
    def http_exception(error):
        return api_response.error(error.description or error.name, error.code or 500)

    @app.errorhandler(Exception)
    def unhandled_exception(error):
        db.session.rollback()
        logger.error(f"Unhandled exception: {error}", exc_info=True)
        return api_response.error("An unexpected error occurred", 500, "INTERNAL_ERROR")


def register_jwt_handlers(app):
    api_response = app.api_response

    @jwt.unauthorized_loader
    def missing_token(reason):
        return api_response.error("Authentication required", 401, "AUTH_REQUIRED")

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return api_response.error("Invalid token", 401, "INVALID_TOKEN")

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return api_response.error("Token has expired", 401, "TOKEN_EXPIRED")


def register_root_endpoints(app):

    @app.route("/")
    def index():
        return jsonify({
            "service": SERVICE_NAME,
            "version": VERSION,
            "status": "online",
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "environment": app.config.get("FLASK_ENV", "production"),
            "endpoints": {
                "health": "/health",
                "auth": "/auth",
                "folders": "/folders",
                "websites": "/websites",
                "tags": "/tags",
                "reminders": "/reminders/send",
            },
        })

    @app.route("/health")
    def health_check():
        """Health check endpoint for monitoring"""
        health_status = {
            "status": "healthy",
            "service": SERVICE_NAME,
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "version": VERSION,
            "checks": {},
        }

        try:
            db.session.execute(text("SELECT 1"))
            health_status["checks"]["database"] = {"status": "healthy"}
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database health check failed: {e}")
            health_status["checks"]["database"] = {"status": "unhealthy"}
            health_status["status"] = "unhealthy"

        if app.config.get("REDIS_URL"):
            from savekar.services.redis_service import RedisService

            redis_ok = RedisService().ping()
            health_status["checks"]["redis"] = {"status": "healthy" if redis_ok else "unhealthy"}
            if not redis_ok and health_status["status"] == "healthy":
                health_status["status"] = "degraded"

        status_code = 503 if health_status["status"] == "unhealthy" else 200
        return jsonify(health_status), status_code

    @app.route("/ping")
    def ping():
        return jsonify({"status": "pong"})
