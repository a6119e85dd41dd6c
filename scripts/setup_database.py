#!/usr/bin/env python3
"""
Database setup script - creates the users and listings tables and their
indexes if they do not exist yet.

Usage: python scripts/setup_database.py
"""
import sys
sys.path.insert(0, '.')

from listingboard.core.config import get_settings
from listingboard.db.postgres import Database
from listingboard.db.tables import create_all


def main():
    print("🚀 Setting up database tables...\n")
    try:
        database = Database.from_settings(get_settings())
    except RuntimeError as e:
        print(f"❌ {e}")
        sys.exit(1)

    try:
        create_all(database.engine)
        print("✅ users, listings and indexes ready\n")
    except Exception as e:
        print(f"❌ Error setting up database: {e}")
        sys.exit(1)
    finally:
        database.dispose()

    print("🎉 Database setup complete!")
    print("\nNext steps:")
    print("1. Run: python scripts/seed_admin.py (to create admin user)")
    print("2. Run: python scripts/seed_listings.py (to add the default listings)")


if __name__ == "__main__":
    main()
