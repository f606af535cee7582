# server/biolink/config.py

import os
from datetime import timedelta


def _database_url() -> str:
    url = os.environ.get("DATABASE_URL", "sqlite:///biolink.db")
    # Heroku/Render style URLs are not accepted by SQLAlchemy 1.4+
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def _cors_origins() -> list:
    raw = os.environ.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["http://localhost:3000", "http://localhost:5173"]


class Config:
    FLASK_ENV = "production"
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.environ.get("JWT_ACCESS_HOURS", 12)))

    REDIS_URL = os.environ.get("REDIS_URL")
    CACHE_TTL_METADATA = int(os.environ.get("CACHE_TTL_METADATA", 86400))

    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_ENABLED = True

    BASE_URL = os.environ.get("BASE_URL", "http://localhost:3000")
    CORS_ORIGINS = _cors_origins()

    METADATA_REQUEST_TIMEOUT = float(os.environ.get("METADATA_REQUEST_TIMEOUT", 8))

    # optional; without them Spotify playlist previews fall back to oEmbed
    SPOTIFY_CLIENT_ID = os.environ.get("SPOTIFY_CLIENT_ID")
    SPOTIFY_CLIENT_SECRET = os.environ.get("SPOTIFY_CLIENT_SECRET")
    PLAYLIST_PREVIEW_TRACKS = 10

    TITLE_MAX_LENGTH = 255
    FOLDER_NAME_MAX_LENGTH = 100
    MAX_MUSIC_LINKS = 6


class DevelopmentConfig(Config):
    FLASK_ENV = "development"
    DEBUG = True


class ProductionConfig(Config):
    FLASK_ENV = "production"
    DEBUG = False


class TestingConfig(Config):
    FLASK_ENV = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = "testing-secret-key-with-enough-length"
    REDIS_URL = None
    RATELIMIT_ENABLED = False
    SPOTIFY_CLIENT_ID = None
    SPOTIFY_CLIENT_SECRET = None


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
