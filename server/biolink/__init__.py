# server/biolink/__init__.py

import logging
from datetime import datetime

from flask import Flask, jsonify, request
from flask_cors import CORS
from sqlalchemy import text

from biolink.config import Config, config_by_name
from biolink.errors import BiolinkError
from biolink.extensions import db, jwt, limiter, migrate
from biolink.utils.responses import ApiResponse

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "biolink-backend"
VERSION = "1.0.0"


def create_app(config=Config):
    """Create and configure the Flask application"""
    if isinstance(config, str):
        config = config_by_name.get(config, Config)

    app = Flask(__name__)
    app.config.from_object(config)
    app.api_response = ApiResponse

    initialize_extensions(app)

    with app.app_context():
        initialize_database(app)

    register_blueprints(app)
    register_error_handlers(app)
    register_root_endpoints(app)

    logger.info(f"Application initialized in {app.config.get('FLASK_ENV', 'production')} mode")

    return app


def initialize_extensions(app):
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    cors_origins = list(filter(None, dict.fromkeys(
        app.config.get("CORS_ORIGINS", []) + [app.config.get("BASE_URL")]
    )))

    CORS(app,
         resources={r"/api/*": {"origins": cors_origins}},
         supports_credentials=True,
         allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
         max_age=3600)

    logger.info(f"CORS initialized with origins: {cors_origins}")

    @jwt.unauthorized_loader
    def missing_token(reason):
        return ApiResponse.error("Authentication required", 401, "AUTH_REQUIRED")

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return ApiResponse.error("Invalid token", 401, "INVALID_TOKEN")

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return ApiResponse.error("Token has expired", 401, "TOKEN_EXPIRED")


def initialize_database(app):
    from biolink import models  # noqa: F401 registers the tables

    try:
        db.create_all()
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error(f"Error creating tables: {e}")
        if app.config.get("FLASK_ENV") == "production":
            raise


def register_blueprints(app):
    from biolink.routes import folders_bp, links_bp, media_bp, music_bp, playlist_bp, public_bp

    app.register_blueprint(links_bp, url_prefix="/api/links")
    app.register_blueprint(folders_bp, url_prefix="/api/folders")
    app.register_blueprint(music_bp, url_prefix="/api/music")
    app.register_blueprint(media_bp, url_prefix="/api/media")
    app.register_blueprint(playlist_bp, url_prefix="/api/playlist")
    app.register_blueprint(public_bp, url_prefix="/api/public")


def register_error_handlers(app):

    @app.errorhandler(BiolinkError)
    def biolink_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            logger.error(f"{error.code}: {error.message}")
        else:
            logger.info(f"Request rejected ({error.code}): {error.message}")
        return ApiResponse.error(error.message, error.status_code, error.code, error.details)

    @app.errorhandler(400)
    def bad_request(error):
        logger.warning(f"Bad request: {error}")
        return ApiResponse.error(getattr(error, "description", None) or "Bad request", 400, "BAD_REQUEST")

    @app.errorhandler(401)
    def unauthorized(error):
        return ApiResponse.error("Authentication required", 401, "AUTH_REQUIRED")

    @app.errorhandler(403)
    def forbidden(error):
        return ApiResponse.error("You do not have permission to access this resource", 403, "FORBIDDEN")

    @app.errorhandler(404)
    def not_found(error):
        return ApiResponse.error("The requested resource was not found", 404, "NOT_FOUND")

    @app.errorhandler(405)
    def method_not_allowed(error):
        return ApiResponse.error(f"The {request.method} method is not allowed for this endpoint", 405, "METHOD_NOT_ALLOWED")

    @app.errorhandler(429)
    def rate_limit_exceeded(error):
        return ApiResponse.error("Rate limit exceeded. Please try again later", 429, "RATE_LIMITED")

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}", exc_info=True)
        return ApiResponse.error("An unexpected error occurred. Please try again later.", 500, "INTERNAL_ERROR")


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
                "ready": "/ready",
                "links": "/api/links",
                "folders": "/api/folders",
                "music": "/api/music",
                "media": "/api/media",
                "playlist": "/api/playlist",
                "public": "/api/public/<owner_ref>",
            },
        })

    @app.route("/health")
    def health_check():
        from biolink.services.redis_service import RedisService

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
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            health_status["checks"]["database"] = {"status": "unhealthy", "error": str(e)}
            health_status["status"] = "degraded"

        cache = RedisService()
        if not cache.is_configured():
            health_status["checks"]["redis"] = {"status": "not_configured"}
        elif cache.ping():
            health_status["checks"]["redis"] = {"status": "healthy"}
        else:
            health_status["checks"]["redis"] = {"status": "unhealthy"}
            health_status["status"] = "degraded"

        status_code = 200 if health_status["status"] == "healthy" else 503
        return jsonify(health_status), status_code

    @app.route("/ready")
    def readiness_check():
        try:
            db.session.execute(text("SELECT 1"))
            is_ready = True
        except Exception as e:
            logger.error(f"Readiness check - database failed: {e}")
            is_ready = False

        return jsonify({
            "ready": is_ready,
            "service": SERVICE_NAME,
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "checks": {"database": is_ready},
        }), 200 if is_ready else 503

    @app.route("/ping")
    def ping():
        return jsonify({
            "pong": True,
            "timestamp": datetime.utcnow().isoformat() + "Z",
        })
