# backend/tasklister/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str) -> list[str]:
    raw = os.environ.get(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Session claims are signed with JWT_SECRET (falls back to SECRET_KEY)
    JWT_SECRET = os.environ.get("JWT_SECRET") or SECRET_KEY
    JWT_ALGORITHM = "HS256"
    SESSION_TTL_DAYS = int(os.environ.get("SESSION_TTL_DAYS", "7"))

    # bcrypt cost factor for admin passwords
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///tasklister.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Outside production every origin is allowed; in production only ALLOWED_ORIGINS
    ENVIRONMENT = os.environ.get("APP_ENV") or os.environ.get("FLASK_ENV", "development")
    ALLOWED_ORIGINS = _env_list("ALLOWED_ORIGINS")
    CORS_ALLOW_ALL = ENVIRONMENT != "production"

    LOG_REQUESTS = _env_flag("LOG_REQUESTS", True)
