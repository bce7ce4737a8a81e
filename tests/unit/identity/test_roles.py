"""
Name: Role Hierarchy Tests

Responsibilities:
  - Verify the total order super_admin > admin > sales > maintenance > receptionist > tenant
  - Verify has_role / has_any_role / has_all_roles semantics
"""

import itertools

import pytest
from realestate_crm.identity.roles import (
    ROLE_RANKS,
    has_all_roles,
    has_any_role,
    has_role,
    is_global_admin,
    is_super_admin,
    rank,
)
from realestate_crm.identity.users import UserRole

pytestmark = pytest.mark.unit

ORDERED = [
    UserRole.SUPER_ADMIN,
    UserRole.ADMIN,
    UserRole.SALES,
    UserRole.MAINTENANCE,
    UserRole.RECEPTIONIST,
    UserRole.TENANT,
]


def test_every_role_has_a_rank():
    assert set(ROLE_RANKS) == set(UserRole)


def test_ranks_are_strictly_decreasing():
    ranks = [rank(r) for r in ORDERED]
    assert ranks == sorted(ranks, reverse=True)
    assert len(set(ranks)) == len(ranks)


@pytest.mark.parametrize("actual,required", itertools.product(ORDERED, ORDERED))
def test_has_role_matches_rank_comparison(actual, required):
    assert has_role(actual, required) is (rank(actual) >= rank(required))


def test_has_role_accepts_plain_strings():
    assert has_role("admin", "sales") is True
    assert has_role("tenant", "receptionist") is False


def test_unknown_role_raises():
    with pytest.raises(ValueError):
        rank("janitor")


def test_has_any_role_passes_when_one_requirement_is_met():
    assert has_any_role(UserRole.SALES, [UserRole.ADMIN, UserRole.MAINTENANCE]) is True
    assert has_any_role(UserRole.TENANT, [UserRole.ADMIN, UserRole.MAINTENANCE]) is False


def test_has_any_role_with_empty_list_is_false():
    assert has_any_role(UserRole.SUPER_ADMIN, []) is False


def test_has_all_roles_requires_the_highest():
    assert has_all_roles(UserRole.ADMIN, [UserRole.ADMIN, UserRole.SALES]) is True
    assert has_all_roles(UserRole.SALES, [UserRole.ADMIN, UserRole.SALES]) is False
    assert has_all_roles(UserRole.ADMIN, []) is False


def test_admin_predicates():
    assert is_super_admin(UserRole.SUPER_ADMIN)
    assert not is_super_admin(UserRole.ADMIN)
    assert is_global_admin(UserRole.ADMIN)
    assert is_global_admin(UserRole.SUPER_ADMIN)
    assert not is_global_admin(UserRole.SALES)
