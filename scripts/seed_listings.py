#!/usr/bin/env python3
"""
Seed listings script - inserts the default listings when the table is empty.

Usage: python scripts/seed_listings.py
"""
import sys
sys.path.insert(0, '.')

from listingboard.core.config import get_settings
from listingboard.db.postgres import Database
from listingboard.schemas.schemas import ListingWrite
from listingboard.services.listing_service import ListingService
from listingboard.services.user_service import UserService
from listingboard.session.local_listings import DEFAULT_LISTINGS


def main():
    settings = get_settings()
    database = Database.from_settings(settings)
    service = ListingService(database)

    try:
        existing = service.count()
        if existing:
            print(f"⚠️  {existing} listings already present, skipping")
            return

        creator = None
        if settings.admin_email:
            admin = UserService(database).get_by_email(settings.admin_email)
            creator = admin["id"] if admin else None

        print("🚀 Seeding listings...\n")
        for item in DEFAULT_LISTINGS:
            data = ListingWrite(
                title=item["title"],
                short_description=item["short_description"],
                full_details=item["full_details"],
                has_certification=item["has_certification"],
                apply_url=item["apply_url"],
            )
            listing = service.create(data, created_by=creator)
            print(f"    ✅ {listing['title']} ({listing['id']})")
    finally:
        database.dispose()

    print("\n🎉 Listings seeded!")


if __name__ == "__main__":
    main()
