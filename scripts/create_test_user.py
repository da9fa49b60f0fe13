#!/usr/bin/env python3
"""Create (or update) a user in the auth database so they can sign in to the dashboard.

Usage:
    python scripts/create_test_user.py test@example.com "Test User" --role coach
    python scripts/create_test_user.py client@example.com "Client" --coach test@example.com
"""
import argparse
import sys
import uuid
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from activity_logs.config import get_settings
from activity_logs.database.connection import DatabaseManager
from activity_logs.database.migrations import create_auth_schema
from activity_logs.database.repositories import UserRepository
from activity_logs.models import UserProfile, UserRole


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a user in the auth database")
    parser.add_argument("email")
    parser.add_argument("name")
    parser.add_argument("--role", choices=[role.value for role in UserRole], default=UserRole.CLIENT.value)
    parser.add_argument("--phone", default=None)
    parser.add_argument("--coach", action="append", default=[], help="Assigned coach email (repeatable)")
    args = parser.parse_args()

    db = DatabaseManager.for_auth(get_settings())
    create_auth_schema(db)
    repo = UserRepository(db)

    existing = repo.get_by_email(args.email)
    profile = UserProfile(
        id=existing.id if existing else uuid.uuid4().hex,
        email=args.email,
        name=args.name,
        phone=args.phone,
        role=args.role,
        assigned_coaches=args.coach,
    )
    repo.upsert(profile)

    print("USER_OK")
    print("id:", profile.id)
    print("email:", profile.email)
    print("role:", profile.role.value)
    print("auth_db:", db.db_url)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
