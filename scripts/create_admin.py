"""
Name: Admin Bootstrap Script

Responsibilities:
  - Create an ADMIN (or DRIVER) user directly in PostgreSQL (idempotent)
  - Hash passwords with Argon2 (same hasher as the API)
  - Mark the account as verified and without forced password change
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

from app.identity.passwords import hash_password  # noqa: E402
from app.identity.users import UserRole  # noqa: E402


def _require_database_url() -> str:
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        raise SystemExit("DATABASE_URL is required to create a user.")
    return db_url


def _normalize_email(email: str) -> str:
    normalized = email.strip().lower()
    if not normalized:
        raise SystemExit("Email is required.")
    return normalized


def _prompt_email() -> str:
    return _normalize_email(input("Email: "))


def _prompt_password() -> str:
    password = getpass.getpass("Password: ")
    if not password:
        raise SystemExit("Password is required.")
    confirm = getpass.getpass("Confirm password: ")
    if password != confirm:
        raise SystemExit("Passwords do not match.")
    return password


def _parse_args() -> argparse.Namespace:
    argv = sys.argv[1:]
    if argv and argv[0] == "--":
        argv = argv[1:]
    parser = argparse.ArgumentParser(
        description="Create the first admin user (idempotent)."
    )
    parser.add_argument("--email", help="User email / username (will be normalized)")
    parser.add_argument("--name", default="Administrator", help="Full name")
    parser.add_argument(
        "--password",
        help="User password (omit to be prompted securely)",
    )
    parser.add_argument(
        "--role",
        default=UserRole.ADMIN.value,
        choices=[role.value for role in UserRole],
        help="User role (default: ADMIN)",
    )
    parser.add_argument(
        "--inactive",
        action="store_true",
        help="Create user as inactive",
    )
    return parser.parse_args(argv)


def _maybe_create_user(
    db_url: str,
    *,
    email: str,
    full_name: str,
    password: str,
    role: str,
    active: bool,
) -> None:
    with psycopg.connect(db_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                "SELECT id, role, is_active FROM users WHERE username = %s",
                (email,),
            )
            row = cur.fetchone()
            if row:
                print(
                    "User already exists: "
                    f"id={row[0]} username={email} role={row[1]} active={row[2]}"
                )
                return

            user_id = uuid4()
            cur.execute(
                """
                INSERT INTO users (
                    id, username, password_hash, full_name, role, is_active,
                    must_change_password, email_verified
                )
                VALUES (%s, %s, %s, %s, %s, %s, false, true)
                """,
                (user_id, email, hash_password(password), full_name, role, active),
            )
            conn.commit()
            print(f"Created user: id={user_id} username={email} role={role}")


def main() -> None:
    args = _parse_args()
    db_url = _require_database_url()
    email = _normalize_email(args.email) if args.email else _prompt_email()
    password = args.password or _prompt_password()
    _maybe_create_user(
        db_url,
        email=email,
        full_name=args.name.strip() or "Administrator",
        password=password,
        role=args.role,
        active=not args.inactive,
    )


if __name__ == "__main__":
    main()
