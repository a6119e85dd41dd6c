#!/usr/bin/env python3
"""
Seed admin user script - creates ADMIN_EMAIL with ADMIN_PASSWORD.

Usage: python scripts/seed_admin.py
"""
import sys
sys.path.insert(0, '.')

from listingboard.core.auth import hash_password
from listingboard.core.config import get_settings
from listingboard.core.errors import ConflictError
from listingboard.db.postgres import Database
from listingboard.services.user_service import UserService


def main():
    settings = get_settings()
    if not settings.admin_email or not settings.admin_password:
        print("❌ ADMIN_EMAIL and ADMIN_PASSWORD must both be set")
        sys.exit(1)

    print("🚀 Seeding admin user...\n")
    database = Database.from_settings(settings)
    try:
        user = UserService(database).create(
            email=settings.admin_email,
            password_hash=hash_password(settings.admin_password),
            first_name="Admin",
            last_name="User",
            role="admin",
        )
    except ConflictError:
        print(f"⚠️  Admin user already exists: {settings.admin_email}")
        print("✅ No action needed\n")
        return
    finally:
        database.dispose()

    print("✅ Admin user created successfully!\n")
    print(f"📧 Email: {user['email']}")
    print(f"👤 Role: {user['role']}")
    print(f"🆔 ID: {user['id']}")


if __name__ == "__main__":
    main()
