"""
Name: Super Admin Bootstrap Script

Responsibilities:
  - Create the first super admin (or a tenant admin) user, idempotently
  - Hash passwords with Argon2
  - Store user in PostgreSQL (schema from alembic 001_users)
"""

from __future__ import annotations

import argparse
import getpass
import os
import sys
from uuid import uuid4

import psycopg

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from realestate_crm.identity.auth_users import hash_password, normalize_email  # noqa: E402
from realestate_crm.identity.users import UserRole  # noqa: E402

MIN_PASSWORD_LENGTH = 8


def _require_database_url() -> str:
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        raise SystemExit("DATABASE_URL is required to create a user.")
    return db_url


def _prompt_email() -> str:
    email = normalize_email(input("Email: "))
    if not email:
        raise SystemExit("Email is required.")
    return email


def _prompt_password() -> str:
    password = getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise SystemExit(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    confirm = getpass.getpass("Confirm password: ")
    if password != confirm:
        raise SystemExit("Passwords do not match.")
    return password


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    argv = sys.argv[1:] if argv is None else argv
    if argv and argv[0] == "--":
        argv = argv[1:]
    parser = argparse.ArgumentParser(
        description="Create the first super admin user (idempotent)."
    )
    parser.add_argument("--email", help="User email (will be normalized)")
    parser.add_argument(
        "--password",
        help="User password (omit to be prompted securely)",
    )
    parser.add_argument("--full-name", default="Super Administrator")
    parser.add_argument(
        "--role",
        default=UserRole.SUPER_ADMIN.value,
        choices=[UserRole.SUPER_ADMIN.value, UserRole.ADMIN.value],
        help="User role (default: super_admin)",
    )
    parser.add_argument(
        "--real-estate-id",
        default=None,
        help="Real estate the user belongs to (required for admin)",
    )
    args = parser.parse_args(argv)
    if args.role == UserRole.ADMIN.value and not args.real_estate_id:
        parser.error("--real-estate-id is required for admin users")
    return args


def _maybe_create_user(
    db_url: str,
    *,
    email: str,
    password: str,
    full_name: str,
    role: str,
    real_estate_id: str | None,
) -> None:
    with psycopg.connect(db_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                "SELECT id, role, is_active FROM users WHERE lower(email) = lower(%s)",
                (email,),
            )
            row = cur.fetchone()
            if row:
                print(
                    "User already exists: "
                    f"id={row[0]} email={email} role={row[1]} active={row[2]}"
                )
                return

            user_id = uuid4()
            modules = ["all"] if role == UserRole.SUPER_ADMIN.value else []
            cur.execute(
                """
                INSERT INTO users (
                    id, email, password_hash, full_name, role, real_estate_id, modules
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    user_id,
                    email,
                    hash_password(password),
                    full_name,
                    role,
                    real_estate_id,
                    modules,
                ),
            )
            conn.commit()
            print(f"Created user: id={user_id} email={email} role={role}")


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    db_url = _require_database_url()
    email = normalize_email(args.email) if args.email else _prompt_email()
    if not email:
        raise SystemExit("Email is required.")
    password = args.password or _prompt_password()
    _maybe_create_user(
        db_url,
        email=email,
        password=password,
        full_name=args.full_name.strip(),
        role=args.role,
        real_estate_id=args.real_estate_id,
    )


if __name__ == "__main__":
    main()
