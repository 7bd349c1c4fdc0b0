"""
Environment-aware configuration.
Values come from the process environment, with a .env file read if present.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///pickem.db")
    SQL_ECHO = False
    # Access tokens are HS256 JWTs signed with the shared client secret; no default on purpose
    JWT_SECRET = os.getenv("AUTH0_CLIENT_SECRET")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("JWT_TOKEN_EXPIRES_SECONDS", "259200")))
    REFRESH_TOKEN_BYTES = 64


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class ProductionConfig(BaseConfig):
    DEBUG = False


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    JWT_SECRET = "test-client-secret"
    JWT_ALGORITHM = "HS256"
    JWT_TOKEN_EXPIRES = timedelta(hours=72)
    LOG_LEVEL = "WARNING"


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/prod/test).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig


HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


def validate_config(config) -> None:
    """Refuse to start with settings the token scheme cannot honour."""
    algorithm = config.get("JWT_ALGORITHM")
    if algorithm not in HMAC_ALGORITHMS:
        raise RuntimeError(f"JWT_ALGORITHM must be one of {', '.join(HMAC_ALGORITHMS)}, got {algorithm!r}")
