"""
Name: In-Memory User Repository Tests

Responsibilities:
  - Case-insensitive email uniqueness (ConflictError)
  - Filters: tenant scope (None included), role, active flag, search
  - Ordering newest first + paging
"""

import pytest
from realestate_crm.crosscutting.exceptions import ConflictError
from realestate_crm.domain.repositories import NewUser, UserFilters
from realestate_crm.identity.users import UserRole
from realestate_crm.infrastructure.repositories import InMemoryUserRepository

pytestmark = pytest.mark.unit


def _new(email, **kwargs) -> NewUser:
    kwargs.setdefault("full_name", "Someone")
    return NewUser(email=email, password_hash="h", **kwargs)


@pytest.fixture
def repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


def test_create_and_get(repo):
    user = repo.create_user(_new("Ana@Example.com", role=UserRole.SALES, modules=("crm",)))

    assert user.email == "ana@example.com"
    assert user.modules == ("crm",)
    assert user.created_at is not None
    assert repo.get_user_by_email("ANA@example.com") == user
    assert repo.get_user_by_id(user.id) == user


def test_duplicate_email_is_conflict(repo):
    repo.create_user(_new("dup@example.com"))
    with pytest.raises(ConflictError) as exc_info:
        repo.create_user(_new("DUP@example.com"))
    assert exc_info.value.error_code == "DUPLICATE_EMAIL"
    assert repo.count_users(filters=UserFilters()) == 1


def test_scope_to_real_estate_includes_null_tenant(repo):
    repo.create_user(_new("a@x.com", real_estate_id="re-1"))
    repo.create_user(_new("b@x.com", real_estate_id="re-2"))
    repo.create_user(_new("c@x.com", real_estate_id=None))

    scoped_none = repo.list_users(
        filters=UserFilters(real_estate_id=None, scope_to_real_estate=True), limit=10, offset=0
    )
    scoped_re1 = repo.list_users(
        filters=UserFilters(real_estate_id="re-1", scope_to_real_estate=True), limit=10, offset=0
    )
    unscoped = repo.list_users(filters=UserFilters(), limit=10, offset=0)

    assert [u.email for u in scoped_none] == ["c@x.com"]
    assert [u.email for u in scoped_re1] == ["a@x.com"]
    assert len(unscoped) == 3


def test_role_active_and_search_filters(repo):
    repo.create_user(_new("maria@x.com", full_name="María Pérez", role=UserRole.SALES))
    repo.create_user(_new("juan@x.com", full_name="Juan Gómez", role=UserRole.TENANT))
    repo.create_user(_new("off@x.com", full_name="Off", role=UserRole.SALES, is_active=False))

    sales = repo.list_users(filters=UserFilters(role=UserRole.SALES), limit=10, offset=0)
    active_sales = repo.count_users(filters=UserFilters(role=UserRole.SALES, is_active=True))
    by_name = repo.list_users(filters=UserFilters(search="GÓMEZ"), limit=10, offset=0)
    by_email = repo.list_users(filters=UserFilters(search="maria@"), limit=10, offset=0)

    assert len(sales) == 2
    assert active_sales == 1
    assert [u.email for u in by_name] == ["juan@x.com"]
    assert [u.email for u in by_email] == ["maria@x.com"]


def test_newest_first_and_paging(repo):
    emails = [f"u{i}@x.com" for i in range(5)]
    for email in emails:
        repo.create_user(_new(email))

    first = repo.list_users(filters=UserFilters(), limit=2, offset=0)
    rest = repo.list_users(filters=UserFilters(), limit=10, offset=2)
    listed = first + rest

    assert len(first) == 2
    assert len(listed) == 5
    created = [u.created_at for u in listed]
    assert created == sorted(created, reverse=True)
    assert repo.list_users(filters=UserFilters(), limit=0, offset=0) == []


def test_update_user(repo):
    user = repo.create_user(_new("u@x.com", role=UserRole.ADMIN))

    updated = repo.update_user(user.id, role=UserRole.SALES, is_active=False)

    assert updated.role == UserRole.SALES
    assert updated.is_active is False
    assert repo.get_user_by_id(user.id).role == UserRole.SALES
    assert updated.updated_at >= user.updated_at


def test_update_missing_user_returns_none(repo):
    from uuid import uuid4

    assert repo.update_user(uuid4(), is_active=False) is None


def test_ping_and_clear(repo):
    repo.create_user(_new("u@x.com"))
    assert repo.ping() is True
    repo.clear()
    assert repo.get_user_by_email("u@x.com") is None
