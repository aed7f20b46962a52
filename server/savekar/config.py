# server/savekar/config.py

import json
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _json_dumps(value) -> str:
    # keep non-ascii tag names searchable with LIKE
    return json.dumps(value, ensure_ascii=False)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _database_url() -> str:
    url = os.environ.get("DATABASE_URL", "sqlite:///savekar.db")
    # Heroku/Render style URLs
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


class Config:
    FLASK_ENV = "production"
    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True, "json_serializer": _json_dumps}

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.environ.get("JWT_ACCESS_TOKEN_HOURS", 24)))

    REDIS_URL = os.environ.get("REDIS_URL")
    CACHE_TTL_METADATA = int(os.environ.get("CACHE_TTL_METADATA", 86400))

    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", REDIS_URL or "memory://")
    RATELIMIT_DEFAULT = "300 per hour"

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
        ).split(",")
        if origin.strip()
    ]

    APP_URL = os.environ.get("APP_URL", "http://localhost:3000")

    MICROLINK_API_URL = os.environ.get("MICROLINK_API_URL", "https://api.microlink.io")
    METADATA_TIMEOUT = int(os.environ.get("METADATA_TIMEOUT", 10))

    GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
    GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
    GEMINI_API_URL = os.environ.get(
        "GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta"
    )

    MAIL_SERVER = os.environ.get("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", 587))
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", True)
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.environ.get("MAIL_DEFAULT_SENDER", MAIL_USERNAME)

    CRON_SECRET = os.environ.get("CRON_SECRET")

    GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID")
    GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
    GUEST_EMAIL = os.environ.get("GUEST_EMAIL", "guest@secondbrain.demo")


class DevelopmentConfig(Config):
    FLASK_ENV = "development"
    DEBUG = True


class TestingConfig(Config):
    FLASK_ENV = "testing"
    TESTING = True
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {"json_serializer": _json_dumps}
    REDIS_URL = None
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = "memory://"
    GEMINI_API_KEY = None
    MAIL_USERNAME = None
    MAIL_PASSWORD = None
    CRON_SECRET = "test-cron-secret"
    GOOGLE_CLIENT_ID = "test-client-id.apps.googleusercontent.com"


class ProductionConfig(Config):
    FLASK_ENV = "production"
    DEBUG = False


config_by_name = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
