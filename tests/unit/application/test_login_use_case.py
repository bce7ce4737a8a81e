"""
Name: Login Use Case Tests

Responsibilities:
  - Missing credentials -> MISSING_CREDENTIALS
  - Unknown email / wrong password / inactive -> INVALID_CREDENTIALS
  - Success returns a verifiable token for the stored user
"""

import pytest
from realestate_crm.application.usecases import LoginInput, LoginUseCase, UserErrorCode
from realestate_crm.domain.repositories import NewUser
from realestate_crm.identity.auth_users import hash_password
from realestate_crm.identity.tokens import verify_access_token
from realestate_crm.identity.users import UserRole
from realestate_crm.infrastructure.repositories import InMemoryUserRepository

pytestmark = pytest.mark.unit


@pytest.fixture
def repo():
    repo = InMemoryUserRepository()
    repo.create_user(
        NewUser(
            email="admin@example.com",
            password_hash=hash_password("Admin123!"),
            full_name="Admin",
            role=UserRole.ADMIN,
            real_estate_id="re-1",
        )
    )
    repo.create_user(
        NewUser(
            email="off@example.com",
            password_hash=hash_password("Off12345!"),
            full_name="Off",
            is_active=False,
        )
    )
    return repo


@pytest.fixture
def use_case(repo, token_settings):
    return LoginUseCase(user_repository=repo, token_settings=token_settings)


@pytest.mark.parametrize(
    "email,password",
    [(None, "x"), ("a@b.com", None), ("", ""), ("   ", "pw")],
)
def test_missing_credentials(use_case, email, password):
    result = use_case.execute(LoginInput(email=email, password=password))
    assert result.error.code == UserErrorCode.MISSING_CREDENTIALS
    assert result.token is None


@pytest.mark.parametrize(
    "email,password,reason",
    [
        ("ghost@example.com", "Admin123!", "unknown_email"),
        ("admin@example.com", "wrong-pass", "bad_password"),
        ("off@example.com", "Off12345!", "inactive_account"),
    ],
)
def test_invalid_credentials_share_one_code(use_case, email, password, reason):
    result = use_case.execute(LoginInput(email=email, password=password))
    assert result.error.code == UserErrorCode.INVALID_CREDENTIALS
    assert result.error.reason == reason
    assert result.token is None


def test_success_returns_verifiable_token(use_case, token_settings):
    result = use_case.execute(LoginInput(email=" ADMIN@example.com ", password="Admin123!"))

    assert result.error is None
    assert result.expires_in == token_settings.ttl_seconds
    ctx = verify_access_token(result.token, token_settings)
    assert ctx.user_id == result.user.id
    assert ctx.role == UserRole.ADMIN
    assert ctx.real_estate_id == "re-1"
