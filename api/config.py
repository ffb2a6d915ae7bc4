"""
Environment-aware configuration.
Secrets, token lifetimes, password hashing cost, CORS and logging.
The database URL is owned by DBStorage (DATABASE_URL).
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _int_env(name: str, default: int | None = None) -> int | None:
    value = os.getenv(name)
    return int(value) if value else default


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # Access tokens (JWT)
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me-to-32-bytes-or-more")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "vehicle-management-api")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=_int_env("ACCESS_TOKEN_EXPIRES_SECONDS", 86400))
    # Refresh tokens (opaque, stored server-side)
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=_int_env("REFRESH_TOKEN_EXPIRES_SECONDS", 604800))
    # Argon2 work factor; None keeps argon2-cffi defaults
    ARGON2_TIME_COST = _int_env("ARGON2_TIME_COST")
    ARGON2_MEMORY_COST = _int_env("ARGON2_MEMORY_COST")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True


class TestingConfig(BaseConfig):
    TESTING = True
    JWT_SECRET = "test-secret-key-for-testing-only-do-not-use"
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)
    REFRESH_TOKEN_EXPIRES = timedelta(days=1)
    # Cheap hashing keeps the suite fast
    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 8192


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
