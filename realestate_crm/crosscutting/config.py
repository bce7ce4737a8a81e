"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Parse the JWT lifetime (JWT_EXPIRES_IN) into seconds

Collaborators:
  - api/main.py: reads settings for CORS and startup validation
  - container.py: chooses repository adapters and builds the login rate limiter
  - identity/tokens.py: signing secret, issuer, audience and TTL

Constraints:
  - Lives in API/infrastructure layer, NOT in domain/application
  - No business logic: pure configuration

Notes:
  - Singleton via lru_cache
  - A missing JWT secret is fatal at startup (ConfigurationError), never per request
"""

import re
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

JWT_ISSUER = "realestatepro-crm"
JWT_AUDIENCE = "realestatepro-crm-users"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}

_TEST_ENVS = {"test", "testing", "ci"}


def parse_duration(value: str) -> int:
    """
    Convert a duration string ("7d", "12h", "30m", "45s", "3600") to seconds.

    Raises:
        ValueError: if the format is not recognized or the value is not positive
    """
    match = _DURATION_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = int(match.group(1)), match.group(2).lower()
    seconds = amount * _DURATION_UNITS[unit]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return seconds


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: PostgreSQL connection string
        app_env: Application environment (development/local/test/production)
        app_version: Version reported by /health
        allowed_origins: Comma-separated CORS origins (default: "*")
        jwt_secret: Secret for signing JWT access tokens (required)
        jwt_expires_in: Token lifetime as duration string (default: "7d")
        login_rate_limit: Login attempts allowed per window and client
        login_rate_limit_window_ms: Fixed window length in milliseconds
        rate_limit_max_keys: Max tracked clients before eviction
        users_page_default_limit: Default page size for GET /users
        users_page_max_limit: Max page size for GET /users
        log_level: Root log level
        log_json: Emit JSON logs (default: True)
        log_dir: Directory for daily rotating log files (optional)
        log_retention_days: Rotated files kept per channel
    """

    database_url: str = ""

    # Environment
    app_env: str = "development"
    app_version: str = "1.0.0"

    # CORS configuration
    allowed_origins: str = "*"

    # Security - JWT Auth
    jwt_secret: str = ""
    jwt_expires_in: str = "7d"

    # Security - Login rate limiting (fixed window)
    login_rate_limit: int = 10
    login_rate_limit_window_ms: int = 60_000
    rate_limit_max_keys: int = 10_000

    # Users API
    users_page_default_limit: int = 10
    users_page_max_limit: int = 100

    # Database - Connection Pool
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000  # 30 seconds

    # Logging
    log_level: str = "INFO"
    log_json: bool = True
    log_dir: str = ""
    log_retention_days: int = 14

    # Dev Tools (Backend Safe)
    dev_seed_admin: bool = False
    dev_seed_admin_email: str = "superadmin@realestatepro.com"
    dev_seed_admin_password: str = "SuperAdmin123!"
    dev_seed_admin_full_name: str = "Super Administrator"
    dev_seed_admin_force_reset: bool = False

    @field_validator("jwt_expires_in")
    @classmethod
    def jwt_expires_in_must_be_duration(cls, v: str) -> str:
        parse_duration(v)
        return v.strip()

    @field_validator(
        "login_rate_limit",
        "login_rate_limit_window_ms",
        "users_page_default_limit",
        "users_page_max_limit",
    )
    @classmethod
    def limits_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("limits must be greater than 0")
        return v

    @property
    def jwt_ttl_seconds(self) -> int:
        return parse_duration(self.jwt_expires_in)

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def validate_security_requirements(self) -> None:
        """
        Called once from the application lifespan.

        Raises:
            ConfigurationError: missing secret anywhere, weak secret in production
        """
        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret:
            raise ConfigurationError(
                "JWT_SECRET is required",
                reason="JWT_SECRET is empty or not set",
            )

        if not self.is_production():
            return

        insecure_secrets = {"dev-secret", "changeme", "change-me", "password", "secret"}
        if jwt_secret in insecure_secrets:
            raise ConfigurationError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ConfigurationError(
                "JWT_SECRET must be at least 32 characters in production"
            )
        if not self.database_url:
            raise ConfigurationError("DATABASE_URL is required in production")

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def is_test(self) -> bool:
        return self.app_env.strip().lower() in _TEST_ENVS

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
