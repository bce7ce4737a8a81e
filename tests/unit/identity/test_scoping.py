"""
Name: Tenant / Building Scoping Tests

Responsibilities:
  - super_admin crosses tenants, admin crosses buildings only
  - Everyone else is pinned to their own real estate / building
"""

import pytest
from realestate_crm.identity.scoping import can_access_building, can_access_tenant
from realestate_crm.identity.users import UserRole

from factories import make_context

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("role", list(UserRole))
def test_no_target_is_always_allowed(role):
    ctx = make_context(role=role, real_estate_id="re-1", building_id="b-1")
    assert can_access_tenant(ctx, None)
    assert can_access_tenant(ctx, "")
    assert can_access_building(ctx, None)


def test_super_admin_accesses_any_tenant():
    ctx = make_context(role=UserRole.SUPER_ADMIN, real_estate_id=None)
    assert can_access_tenant(ctx, "re-2")


@pytest.mark.parametrize(
    "role",
    [UserRole.ADMIN, UserRole.SALES, UserRole.MAINTENANCE, UserRole.RECEPTIONIST, UserRole.TENANT],
)
def test_other_roles_are_pinned_to_their_tenant(role):
    ctx = make_context(role=role, real_estate_id="re-1")
    assert can_access_tenant(ctx, "re-1")
    assert not can_access_tenant(ctx, "re-2")


def test_actor_without_tenant_cannot_target_one():
    ctx = make_context(role=UserRole.ADMIN, real_estate_id=None)
    assert not can_access_tenant(ctx, "re-1")


@pytest.mark.parametrize("role", [UserRole.SUPER_ADMIN, UserRole.ADMIN])
def test_global_admins_access_any_building(role):
    ctx = make_context(role=role, building_id=None)
    assert can_access_building(ctx, "b-9")


def test_tenant_is_pinned_to_its_building():
    ctx = make_context(role=UserRole.TENANT, building_id="b-1")
    assert can_access_building(ctx, "b-1")
    assert not can_access_building(ctx, "b-2")
