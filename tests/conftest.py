"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure test environment (APP_ENV=test, JWT secret, no .env file)
  - Reset container singletons between tests (fresh in-memory adapters)
  - Provide store-backed user seeding and bearer headers

Collaborators:
  - pytest: Test framework
  - realestate_crm.container: in-memory repositories in test env
  - factories: entity builders shared with test modules

Notes:
  - Settings are cached; each test gets a clean cache via reset_app_state
"""

import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-with-enough-length-for-hs256")

from realestate_crm.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from factories import TEST_PASSWORD  # noqa: E402
from realestate_crm.container import (  # noqa: E402
    get_audit_repository,
    get_user_repository,
    reset_container,
)
from realestate_crm.domain.repositories import NewUser  # noqa: E402
from realestate_crm.identity.auth_users import hash_password  # noqa: E402
from realestate_crm.identity.tokens import TokenSettings, issue_access_token  # noqa: E402
from realestate_crm.identity.users import User, UserRole  # noqa: E402


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Tests against PostgreSQL (RUN_INTEGRATION=1)"
    )


@pytest.fixture(autouse=True)
def reset_app_state():
    """R: Clean settings cache + container singletons around every test."""
    app_config.get_settings.cache_clear()
    reset_container()
    yield
    app_config.get_settings.cache_clear()
    reset_container()


@pytest.fixture
def token_settings() -> TokenSettings:
    return TokenSettings(secret="unit-test-secret-with-enough-length", ttl_seconds=3600)


# ============================================================================
# Store-backed fixtures (in-memory adapters from the container)
# ============================================================================


@pytest.fixture
def user_repo():
    return get_user_repository()


@pytest.fixture
def audit_repo():
    return get_audit_repository()


@pytest.fixture
def seed_user(user_repo):
    """R: Persist a user with TEST_PASSWORD in the in-memory store."""

    def _seed(
        *,
        email: str,
        role: UserRole = UserRole.TENANT,
        real_estate_id: str | None = "re-1",
        building_id: str | None = None,
        is_active: bool = True,
        password: str = TEST_PASSWORD,
    ) -> User:
        return user_repo.create_user(
            NewUser(
                email=email,
                password_hash=hash_password(password),
                full_name=f"Seeded {role.value}",
                role=role,
                real_estate_id=real_estate_id,
                building_id=building_id,
                is_active=is_active,
            )
        )

    return _seed


@pytest.fixture
def bearer():
    """R: Authorization header for a user (signed with app settings)."""

    def _bearer(user: User) -> dict[str, str]:
        token, _ = issue_access_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _bearer
