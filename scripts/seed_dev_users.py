#!/usr/bin/env python3
"""Create the dashboard's demo logins.

Users go through AuthService.register, the same path as the register
endpoint, so passwords are stored as bcrypt digests. Existing emails are
left alone, which makes the script safe to re-run.

Usage:
    JWT_SECRET=dev python scripts/seed_dev_users.py
    JWT_SECRET=dev python scripts/seed_dev_users.py --password s3cret
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from api.auth.service import AuthService
from api.exceptions import ConflictError
from postboard.db.engine import get_session, init_db

DEMO_ACCOUNTS = [
    ("admin", "admin@test.com", "admin"),
    ("editor", "editor@test.com", "editor"),
]


def seed_dev_users(password: str = "password123") -> int:
    """Register each missing demo account and return how many were created."""
    init_db()
    created = 0
    with get_session() as session:
        auth = AuthService(session)
        for username, email, role in DEMO_ACCOUNTS:
            if auth.get_user_by_email(email):
                print(f"{email}: exists")
                continue
            try:
                user = auth.register(username, email, password, role=role)
            except ConflictError as e:
                print(f"{email}: skipped ({e.message})")
                continue
            created += 1
            print(f"{email}: created as {user.role.value} ({user.id})")
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--password", default="password123", help="Password for every demo account")
    args = parser.parse_args()
    count = seed_dev_users(args.password)
    print(f"Seeded {count} user(s)")


if __name__ == "__main__":
    main()
