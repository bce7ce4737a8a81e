"""
Name: POST /auth/login Endpoint Tests

Responsibilities:
  - Successful login returns token + camelCase user (no password hash)
  - Missing fields -> 400 MISSING_CREDENTIALS
  - Unknown email, wrong password and inactive account are indistinguishable
  - Fixed-window rate limit -> 429 with Retry-After
  - Audit events for accepted and rejected logins
"""

import pytest
from fastapi.testclient import TestClient
from realestate_crm.api.main import app
from realestate_crm.container import get_login_rate_limiter
from realestate_crm.crosscutting.config import get_settings
from realestate_crm.domain.audit import AuditDecision
from realestate_crm.identity.tokens import verify_access_token
from realestate_crm.identity.users import UserRole

from factories import TEST_PASSWORD

pytestmark = pytest.mark.unit


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin(seed_user):
    return seed_user(email="admin@acme.com", role=UserRole.ADMIN, real_estate_id="re-1")


def _login(client, email, password, **kwargs):
    return client.post("/auth/login", json={"email": email, "password": password}, **kwargs)


class TestLoginSuccess:
    def test_returns_token_and_user(self, client, admin):
        response = _login(client, "admin@acme.com", TEST_PASSWORD)

        assert response.status_code == 200
        body = response.json()
        assert body["tokenType"] == "Bearer"
        assert body["expiresIn"] == get_settings().jwt_ttl_seconds
        assert body["user"]["id"] == str(admin.id)
        assert body["user"]["realEstateId"] == "re-1"
        assert body["user"]["fullName"] == admin.full_name
        assert body["user"]["isActive"] is True
        assert "passwordHash" not in body["user"]
        assert "password_hash" not in body["user"]

        ctx = verify_access_token(body["token"])
        assert ctx.user_id == admin.id
        assert ctx.role == UserRole.ADMIN

    def test_super_admin_without_real_estate_can_log_in(self, client, seed_user):
        seed_user(
            email="superadmin@x.com",
            role=UserRole.SUPER_ADMIN,
            real_estate_id=None,
            password="SuperAdmin123!",
        )

        response = _login(client, "superadmin@x.com", "SuperAdmin123!")

        assert response.status_code == 200
        assert response.json()["user"]["realEstateId"] is None
        assert verify_access_token(response.json()["token"]).role == UserRole.SUPER_ADMIN

    def test_email_is_case_insensitive(self, client, admin):
        response = _login(client, "  ADMIN@acme.com ", TEST_PASSWORD)
        assert response.status_code == 200

    def test_success_is_audited(self, client, admin, audit_repo):
        _login(client, "admin@acme.com", TEST_PASSWORD)

        [event] = audit_repo.list_events(action_prefix="auth.login")
        assert event.decision == AuditDecision.ALLOWED
        assert event.actor == f"user:{admin.id}"
        assert event.route == "POST /auth/login"


class TestLoginRejections:
    @pytest.mark.parametrize(
        "payload",
        [{}, {"email": "admin@acme.com"}, {"password": "x"}, {"email": "", "password": ""}],
    )
    def test_missing_credentials(self, client, payload):
        response = client.post("/auth/login", json=payload)

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["code"] == "MISSING_CREDENTIALS"

    def test_invalid_credentials_look_identical(self, client, seed_user, admin):
        seed_user(email="off@acme.com", is_active=False)

        responses = [
            _login(client, "ghost@acme.com", TEST_PASSWORD),
            _login(client, "admin@acme.com", "wrong-password"),
            _login(client, "off@acme.com", TEST_PASSWORD),
        ]

        assert {r.status_code for r in responses} == {401}
        shapes = {
            (b["code"], b["detail"], b["title"], b["status"])
            for b in (r.json() for r in responses)
        }
        assert len(shapes) == 1
        assert shapes.pop()[0] == "INVALID_CREDENTIALS"

    def test_rejection_is_audited_with_reason(self, client, admin, audit_repo):
        _login(client, "admin@acme.com", "wrong-password")

        [event] = audit_repo.list_events(action_prefix="auth.login")
        assert event.decision == AuditDecision.REJECTED
        assert event.reason == "bad_password"
        assert event.actor == "anonymous"


class TestLoginRateLimit:
    @pytest.fixture
    def limited_client(self, monkeypatch):
        monkeypatch.setenv("LOGIN_RATE_LIMIT", "3")
        monkeypatch.setenv("LOGIN_RATE_LIMIT_WINDOW_MS", "60000")
        get_settings.cache_clear()
        get_login_rate_limiter.cache_clear()
        return TestClient(app)

    def test_blocks_after_limit_with_retry_after(self, limited_client, admin):
        for _ in range(3):
            assert _login(limited_client, "admin@acme.com", "nope").status_code == 401

        response = _login(limited_client, "admin@acme.com", TEST_PASSWORD)

        assert response.status_code == 429
        assert response.json()["code"] == "RATE_LIMITED"
        retry_after = int(response.headers["Retry-After"])
        assert 1 <= retry_after <= 60

    def test_limit_is_per_client(self, limited_client, admin):
        first = {"X-Forwarded-For": "10.0.0.1"}
        second = {"X-Forwarded-For": "10.0.0.2"}
        for _ in range(3):
            _login(limited_client, "admin@acme.com", "nope", headers=first)

        assert _login(limited_client, "admin@acme.com", TEST_PASSWORD, headers=first).status_code == 429
        assert _login(limited_client, "admin@acme.com", TEST_PASSWORD, headers=second).status_code == 200
