#!/usr/bin/env python3
"""Create or update a user and give them a default schedule."""

import sys
from pathlib import Path

# Make the backend directory importable
BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BASE_DIR))

from sqlmodel import Session, select

from app.core.security import get_password_hash
from app.db import engine, init_db
from app.models import User
from app.services.permissions import ROLE_PERMISSIONS
from app.services.schedules import ensure_user_schedule


def create_user():
    print("=" * 60)
    print("Create user")
    print("=" * 60)

    email = input("Email: ").strip()
    if not email:
        print("Error: email is required")
        return

    full_name = input("Full name (optional): ").strip() or None
    password = input("Password: ").strip()
    if not password:
        print("Error: password is required")
        return

    roles = "/".join(ROLE_PERMISSIONS)
    role = input(f"Role ({roles}, default employee): ").strip() or "employee"
    if role not in ROLE_PERMISSIONS:
        print(f"Error: unknown role {role}")
        return

    init_db()
    with Session(engine) as session:
        existing = session.exec(
            select(User).where(User.email == email.lower())
        ).first()

        if existing:
            print(f"\nUser {email} already exists")
            response = input("Update the existing user? (y/n): ").strip().lower()
            if response != "y":
                print("Cancelled")
                return
            user = existing
            user.full_name = full_name
            user.hashed_password = get_password_hash(password)
            user.role = role
        else:
            user = User(
                email=email.lower(),
                full_name=full_name,
                hashed_password=get_password_hash(password),
                role=role,
            )
            session.add(user)

        session.commit()
        session.refresh(user)
        schedule = ensure_user_schedule(session, user)

        print(f"\n✓ User {'updated' if existing else 'created'}")
        print(f"  ID: {user.id}")
        print(f"  Email: {user.email}")
        print(f"  Name: {user.full_name or '(not set)'}")
        print(f"  Role: {user.role}")
        print(f"  Schedule timezone: {schedule.timezone}")
        print("=" * 60)


if __name__ == "__main__":
    try:
        create_user()
    except KeyboardInterrupt:
        print("\n\nCancelled")
