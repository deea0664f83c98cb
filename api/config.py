"""
Environment-aware configuration.
Secrets, token lifetimes, database URL and argon2 cost all come from the
environment (.env is read if present).
"""
import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()  # Read .env if present


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    DEBUG = False
    TESTING = False
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    SENTRY_DSN = os.getenv("SENTRY_DSN")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///posts.db")
    SQL_ECHO = _env_bool("SQL_ECHO")

    # Separate secrets per token class
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "dev-access-secret-change-me-0123456789")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "900")))
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "dev-refresh-secret-change-me-0123456789")
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", "604800")))
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    SECRET_API_KEY = os.getenv("SECRET_API_KEY", "dev-api-key")

    ARGON2_TIME_COST = int(os.getenv("ARGON2_TIME_COST", "3"))
    ARGON2_MEMORY_COST = int(os.getenv("ARGON2_MEMORY_COST", "65536"))
    ARGON2_PARALLELISM = int(os.getenv("ARGON2_PARALLELISM", "4"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    SQL_ECHO = False
    ACCESS_TOKEN_SECRET = "test-access-secret-0123456789abcdef"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-0123456789abcdef"
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)
    REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    SECRET_API_KEY = "test-api-key"
    SENTRY_DSN = None
    # argon2 minimums keep the suite fast
    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 8
    ARGON2_PARALLELISM = 1


class ProductionConfig(BaseConfig):
    DEBUG = False
    DATABASE_URL = os.getenv("DATABASE_URL")
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET")
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET")
    SECRET_API_KEY = os.getenv("SECRET_API_KEY")


REQUIRED_IN_PRODUCTION = (
    "DATABASE_URL",
    "ACCESS_TOKEN_SECRET",
    "REFRESH_TOKEN_SECRET",
    "SECRET_API_KEY",
)


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


def check_config(config) -> None:
    """Fail fast when a production config is missing a secret."""
    if config is not ProductionConfig:
        return
    missing = [key for key in REQUIRED_IN_PRODUCTION if not getattr(config, key, None)]
    if missing:
        raise RuntimeError(f"Missing required settings: {', '.join(missing)}")


@dataclass(frozen=True)
class AuthSettings:
    access_token_secret: str
    access_token_expires: timedelta
    refresh_token_secret: str
    refresh_token_expires: timedelta
    algorithm: str
    api_key: str

    @classmethod
    def from_mapping(cls, config) -> "AuthSettings":
        return cls(
            access_token_secret=config["ACCESS_TOKEN_SECRET"],
            access_token_expires=config["ACCESS_TOKEN_EXPIRES"],
            refresh_token_secret=config["REFRESH_TOKEN_SECRET"],
            refresh_token_expires=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            api_key=config["SECRET_API_KEY"],
        )
