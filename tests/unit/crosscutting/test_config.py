"""
Name: Settings Tests

Responsibilities:
  - Duration parsing for JWT_EXPIRES_IN
  - Validation of limits and security requirements
  - Environment helpers (test env, production, CORS list)
"""

import pytest
from pydantic import ValidationError
from realestate_crm.crosscutting.config import Settings, get_settings, parse_duration
from realestate_crm.crosscutting.exceptions import ConfigurationError

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "value,seconds",
    [("7d", 604800), ("12h", 43200), ("30m", 1800), ("45s", 45), ("3600", 3600), ("1w", 604800), (" 2H ", 7200)],
)
def test_parse_duration(value, seconds):
    assert parse_duration(value) == seconds


@pytest.mark.parametrize("value", ["", "abc", "7x", "0d", "-1h", "1.5h"])
def test_parse_duration_rejects_invalid(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_defaults():
    s = Settings(jwt_secret="x")
    assert s.jwt_ttl_seconds == 7 * 24 * 3600
    assert s.login_rate_limit == 10
    assert s.login_rate_limit_window_ms == 60_000
    assert s.users_page_default_limit == 10
    assert s.users_page_max_limit == 100
    assert s.get_allowed_origins_list() == ["*"]


def test_invalid_expires_in_fails_validation():
    with pytest.raises(ValidationError):
        Settings(jwt_expires_in="forever")


@pytest.mark.parametrize("field", ["login_rate_limit", "users_page_max_limit"])
def test_limits_must_be_positive(field):
    with pytest.raises(ValidationError):
        Settings(**{field: 0})


def test_env_vars_are_read(monkeypatch):
    monkeypatch.setenv("LOGIN_RATE_LIMIT", "3")
    monkeypatch.setenv("JWT_EXPIRES_IN", "15m")
    get_settings.cache_clear()

    s = get_settings()

    assert s.login_rate_limit == 3
    assert s.jwt_ttl_seconds == 900


def test_allowed_origins_list_splits_and_trims():
    s = Settings(allowed_origins=" http://a.com, http://b.com ,")
    assert s.get_allowed_origins_list() == ["http://a.com", "http://b.com"]


@pytest.mark.parametrize("env", ["test", "TESTING", "ci"])
def test_is_test(env):
    assert Settings(app_env=env).is_test()


def test_missing_secret_is_fatal_everywhere():
    with pytest.raises(ConfigurationError):
        Settings(app_env="development", jwt_secret="").validate_security_requirements()
    with pytest.raises(ConfigurationError):
        Settings(app_env="test", jwt_secret="   ").validate_security_requirements()


def test_development_accepts_short_secret():
    Settings(app_env="development", jwt_secret="dev").validate_security_requirements()


@pytest.mark.parametrize(
    "secret", ["changeme", "short-secret", "secret"]
)
def test_production_rejects_weak_secret(secret):
    s = Settings(app_env="production", jwt_secret=secret, database_url="postgresql://x")
    with pytest.raises(ConfigurationError):
        s.validate_security_requirements()


def test_production_requires_database_url():
    s = Settings(app_env="production", jwt_secret="x" * 40, database_url="")
    with pytest.raises(ConfigurationError):
        s.validate_security_requirements()


def test_production_with_strong_secret_passes():
    s = Settings(app_env="production", jwt_secret="x" * 40, database_url="postgresql://x")
    s.validate_security_requirements()
    assert s.is_production()
