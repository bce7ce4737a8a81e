"""
Name: Request Gate Tests

Responsibilities:
  - evaluate_access: NO_TOKEN -> VERIFYING -> ROLE_CHECKING -> SCOPE_CHECKING
  - FastAPI dependencies: 401/403 mapping, audit event per decision,
    UserContext attached to the request, optional store re-validation
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient
from realestate_crm.api.exception_handlers import register_exception_handlers
from realestate_crm.context import get_context_dict
from realestate_crm.domain.audit import AuditDecision
from realestate_crm.identity.gate import (
    GATE_AUDIT_ACTION,
    AccessPolicy,
    GateState,
    evaluate_access,
    require_any_role,
    require_authenticated,
    require_role,
)
from realestate_crm.identity.tokens import UserContext, issue_access_token
from realestate_crm.identity.users import UserRole

from factories import make_user

pytestmark = pytest.mark.unit


# ============================================================================
# evaluate_access (pure)
# ============================================================================


class TestEvaluateAccess:
    def test_missing_token_is_401(self, token_settings):
        decision = evaluate_access(None, AccessPolicy(), token_settings=token_settings)
        assert decision.state == GateState.REJECTED_401
        assert decision.status_code == 401
        assert decision.error_code == "MISSING_TOKEN"
        assert decision.context is None

    def test_invalid_token_is_401(self, token_settings):
        decision = evaluate_access("nope", AccessPolicy(), token_settings=token_settings)
        assert decision.state == GateState.REJECTED_401
        assert decision.error_code == "INVALID_TOKEN"

    def test_expired_token_is_401(self, token_settings):
        past = datetime.now(timezone.utc) - timedelta(days=1)
        token, _ = issue_access_token(make_user(), token_settings, now=past)
        decision = evaluate_access(token, AccessPolicy(), token_settings=token_settings)
        assert decision.state == GateState.REJECTED_401
        assert decision.reason == "expired"

    def test_authenticated_only_policy_accepts_any_role(self, token_settings):
        token, _ = issue_access_token(make_user(role=UserRole.TENANT), token_settings)
        decision = evaluate_access(token, AccessPolicy(), token_settings=token_settings)
        assert decision.allowed
        assert decision.context.role == UserRole.TENANT

    def test_insufficient_role_is_403(self, token_settings):
        token, _ = issue_access_token(make_user(role=UserRole.SALES), token_settings)
        decision = evaluate_access(
            token, AccessPolicy(roles=(UserRole.ADMIN,)), token_settings=token_settings
        )
        assert decision.state == GateState.REJECTED_403
        assert decision.error_code == "INSUFFICIENT_PERMISSIONS"
        assert decision.context is not None

    def test_higher_role_satisfies_lower_requirement(self, token_settings):
        token, _ = issue_access_token(make_user(role=UserRole.ADMIN), token_settings)
        decision = evaluate_access(
            token, AccessPolicy(roles=(UserRole.SALES,)), token_settings=token_settings
        )
        assert decision.allowed

    def test_foreign_tenant_is_403(self, token_settings):
        token, _ = issue_access_token(
            make_user(role=UserRole.ADMIN, real_estate_id="re-1"), token_settings
        )
        decision = evaluate_access(
            token,
            AccessPolicy(roles=(UserRole.ADMIN,), real_estate_id="re-2"),
            token_settings=token_settings,
        )
        assert decision.state == GateState.REJECTED_403
        assert decision.error_code == "REAL_ESTATE_ACCESS_DENIED"

    def test_super_admin_crosses_tenants(self, token_settings):
        token, _ = issue_access_token(
            make_user(role=UserRole.SUPER_ADMIN, real_estate_id=None), token_settings
        )
        decision = evaluate_access(
            token,
            AccessPolicy(roles=(UserRole.ADMIN,), real_estate_id="re-2"),
            token_settings=token_settings,
        )
        assert decision.allowed

    def test_foreign_building_is_403(self, token_settings):
        token, _ = issue_access_token(
            make_user(role=UserRole.TENANT, building_id="b-1"), token_settings
        )
        decision = evaluate_access(
            token, AccessPolicy(building_id="b-2"), token_settings=token_settings
        )
        assert decision.state == GateState.REJECTED_403
        assert decision.error_code == "BUILDING_ACCESS_DENIED"

    def test_role_check_happens_before_scope_check(self, token_settings):
        token, _ = issue_access_token(
            make_user(role=UserRole.SALES, real_estate_id="re-1"), token_settings
        )
        decision = evaluate_access(
            token,
            AccessPolicy(roles=(UserRole.ADMIN,), real_estate_id="re-2"),
            token_settings=token_settings,
        )
        assert decision.error_code == "INSUFFICIENT_PERMISSIONS"


# ============================================================================
# FastAPI dependencies
# ============================================================================


def _build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/me")
    def me(ctx: UserContext = Depends(require_authenticated())):
        return {"user_id": str(ctx.user_id), "role": ctx.role.value}

    @app.get("/admin")
    def admin(request: Request, ctx: UserContext = Depends(require_role(UserRole.ADMIN))):
        return {"same": request.state.user_context is ctx}

    @app.get("/staff")
    def staff(
        _: UserContext = Depends(require_any_role(UserRole.MAINTENANCE, UserRole.SALES)),
    ):
        return {"ok": True}

    @app.get("/estates/{realEstateId}")
    def estate(
        realEstateId: str,
        _: UserContext = Depends(require_role(UserRole.SALES, tenant_param="realEstateId")),
    ):
        return {"ok": True}

    @app.post("/sensitive")
    def sensitive(_: UserContext = Depends(require_role(UserRole.ADMIN, revalidate=True))):
        return {"ok": True}

    @app.get("/log-context")
    def log_context(_: UserContext = Depends(require_role(UserRole.ADMIN))):
        return get_context_dict()

    return app


class TestGateDependencies:
    def test_no_token_returns_401_problem_json(self, audit_repo):
        client = TestClient(_build_app())
        response = client.get("/me")

        assert response.status_code == 401
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["code"] == "MISSING_TOKEN"

        events = audit_repo.list_events(action_prefix=GATE_AUDIT_ACTION)
        assert len(events) == 1
        assert events[0].decision == AuditDecision.REJECTED
        assert events[0].actor == "anonymous"
        assert events[0].route == "GET /me"

    def test_x_user_headers_are_ignored(self):
        client = TestClient(_build_app())
        response = client.get(
            "/admin", headers={"x-user-id": "1", "x-user-role": "super_admin"}
        )
        assert response.status_code == 401

    def test_valid_token_passes_and_attaches_context(self, bearer, audit_repo):
        user = make_user(role=UserRole.ADMIN)
        client = TestClient(_build_app())

        response = client.get("/admin", headers=bearer(user))

        assert response.status_code == 200
        assert response.json() == {"same": True}
        events = audit_repo.list_events(action_prefix=GATE_AUDIT_ACTION)
        assert [e.decision for e in events] == [AuditDecision.ALLOWED]
        assert events[0].actor == f"user:{user.id}"

    def test_actor_is_visible_in_handler_log_context(self, bearer):
        user = make_user(role=UserRole.ADMIN, real_estate_id="re-9")
        client = TestClient(_build_app())

        response = client.get("/log-context", headers=bearer(user))

        assert response.status_code == 200
        assert response.json()["user_id"] == str(user.id)
        assert response.json()["real_estate_id"] == "re-9"

    def test_insufficient_role_returns_403(self, bearer, audit_repo):
        client = TestClient(_build_app())
        response = client.get("/admin", headers=bearer(make_user(role=UserRole.SALES)))

        assert response.status_code == 403
        assert response.json()["code"] == "INSUFFICIENT_PERMISSIONS"
        events = audit_repo.list_events(action_prefix=GATE_AUDIT_ACTION)
        assert events[0].decision == AuditDecision.REJECTED

    def test_any_role_uses_any_semantics(self, bearer):
        client = TestClient(_build_app())
        ok = client.get("/staff", headers=bearer(make_user(role=UserRole.MAINTENANCE)))
        denied = client.get("/staff", headers=bearer(make_user(role=UserRole.RECEPTIONIST)))
        assert ok.status_code == 200
        assert denied.status_code == 403

    def test_require_any_role_needs_roles(self):
        with pytest.raises(ValueError):
            require_any_role()

    def test_tenant_param_from_path(self, bearer):
        client = TestClient(_build_app())
        headers = bearer(make_user(role=UserRole.SALES, real_estate_id="re-1"))

        assert client.get("/estates/re-1", headers=headers).status_code == 200
        denied = client.get("/estates/re-2", headers=headers)
        assert denied.status_code == 403
        assert denied.json()["code"] == "REAL_ESTATE_ACCESS_DENIED"

    def test_revalidate_rejects_deleted_user(self, bearer):
        client = TestClient(_build_app())
        ghost = make_user(role=UserRole.ADMIN)

        response = client.post("/sensitive", headers=bearer(ghost))

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_revalidate_rejects_deactivated_user(self, bearer, seed_user, user_repo):
        admin = seed_user(email="admin@example.com", role=UserRole.ADMIN)
        headers = bearer(admin)
        user_repo.update_user(admin.id, is_active=False)

        response = TestClient(_build_app()).post("/sensitive", headers=headers)
        assert response.status_code == 401

    def test_revalidate_rejects_demoted_user(self, bearer, seed_user, user_repo):
        admin = seed_user(email="admin@example.com", role=UserRole.ADMIN)
        headers = bearer(admin)
        user_repo.update_user(admin.id, role=UserRole.SALES)

        response = TestClient(_build_app()).post("/sensitive", headers=headers)
        assert response.status_code == 403

    def test_revalidate_passes_for_stored_active_user(self, bearer, seed_user):
        admin = seed_user(email="admin@example.com", role=UserRole.ADMIN)
        response = TestClient(_build_app()).post("/sensitive", headers=bearer(admin))
        assert response.status_code == 200

    def test_audit_failure_does_not_break_request(self, bearer, audit_repo, monkeypatch):
        def boom(_event):
            raise RuntimeError("sink down")

        monkeypatch.setattr(audit_repo, "record_event", boom)
        response = TestClient(_build_app()).get(
            "/me", headers=bearer(make_user(role=UserRole.TENANT))
        )
        assert response.status_code == 200
