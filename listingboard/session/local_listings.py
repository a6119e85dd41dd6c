"""
Client-local listings cache, kept in the same key-value store as the
session record under "internship_listings".

Used when the client runs without the API. Holds at most 30 listings and
seeds itself with the default listings when empty or unreadable.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from listingboard.core.logging_config import get_logger
from listingboard.session.storage import KeyValueStorage, StorageUnavailable

logger = get_logger(__name__)

LISTINGS_KEY = "internship_listings"
MAX_LOCAL_LISTINGS = 30

# Form rules of the admin dashboard
MIN_TITLE = 3
MIN_SHORT_DESCRIPTION = 20
MAX_SHORT_DESCRIPTION = 200
MIN_FULL_DETAILS = 50


class CapacityError(Exception):
    """The local cache already holds the maximum number of listings."""


class LocalListingError(ValueError):
    """A local listing failed the form rules."""


DEFAULT_LISTINGS = [
    {
        "id": "1",
        "title": "Vegetable Cultivation",
        "short_description": (
            "Learn sustainable farming techniques and modern agricultural practices. "
            "Gain hands-on experience with crop management."
        ),
        "full_details": (
            "## About This Internship\n\n"
            "Hands-on experience in sustainable farming and modern agricultural techniques.\n\n"
            "### What You'll Learn:\n"
            "- Sustainable farming methods\n"
            "- Crop rotation and soil management\n"
            "- Organic pest control\n\n"
            "### Duration: 3 months\n"
            "### Location: On-site"
        ),
        "has_certification": True,
        "apply_url": "https://example.com/apply/vegetable-cultivation",
        "created_at": "2025-01-01T00:00:00+00:00",
    },
    {
        "id": "2",
        "title": "Web Development Internship",
        "short_description": (
            "Learn modern web development with React, Next.js, and TypeScript "
            "in a professional environment"
        ),
        "full_details": (
            "## About This Internship\n\n"
            "Join our development team and build modern web applications.\n\n"
            "### What You'll Learn:\n"
            "- React and Next.js development\n"
            "- RESTful API integration\n"
            "- Git and collaborative development\n\n"
            "### Duration: 6 months\n"
            "### Location: Remote/Hybrid"
        ),
        "has_certification": True,
        "apply_url": "https://example.com/apply/web-development",
        "created_at": "2025-01-02T00:00:00+00:00",
    },
    {
        "id": "3",
        "title": "Mobile App Development",
        "short_description": (
            "Build mobile applications using React Native and gain hands-on "
            "experience with real projects"
        ),
        "full_details": (
            "## About This Project\n\n"
            "Work on cross-platform mobile app projects using React Native.\n\n"
            "### What You'll Learn:\n"
            "- iOS and Android app deployment\n"
            "- Mobile UI/UX best practices\n\n"
            "### Duration: 4 months\n"
            "### Location: Remote"
        ),
        "has_certification": False,
        "apply_url": "https://example.com/apply/mobile-app",
        "created_at": "2025-01-03T00:00:00+00:00",
    },
]


def _validate(title: str, short_description: str, full_details: str, apply_url: str) -> None:
    if len((title or "").strip()) < MIN_TITLE:
        raise LocalListingError(f"Title must be at least {MIN_TITLE} characters")
    short_len = len((short_description or "").strip())
    if short_len < MIN_SHORT_DESCRIPTION:
        raise LocalListingError(f"Short description must be at least {MIN_SHORT_DESCRIPTION} characters")
    if short_len > MAX_SHORT_DESCRIPTION:
        raise LocalListingError(f"Short description must be at most {MAX_SHORT_DESCRIPTION} characters")
    if len((full_details or "").strip()) < MIN_FULL_DETAILS:
        raise LocalListingError(f"Full details must be at least {MIN_FULL_DETAILS} characters")
    if not (apply_url or "").strip():
        raise LocalListingError("Apply URL is required")


class LocalListingStore:
    def __init__(self, storage: KeyValueStorage, capacity: int = MAX_LOCAL_LISTINGS) -> None:
        self.storage = storage
        self.capacity = capacity

    def all(self) -> List[dict]:
        try:
            stored = self.storage.get_item(LISTINGS_KEY)
        except StorageUnavailable as exc:
            logger.warning("Local listings unavailable: %s", exc)
            return [dict(item) for item in DEFAULT_LISTINGS]

        if stored:
            try:
                listings = json.loads(stored)
            except ValueError:
                listings = None
            if isinstance(listings, list) and listings:
                return listings
            return [dict(item) for item in DEFAULT_LISTINGS]

        self._save(DEFAULT_LISTINGS)
        return [dict(item) for item in DEFAULT_LISTINGS]

    def get(self, listing_id: str) -> Optional[dict]:
        return next((item for item in self.all() if str(item.get("id")) == str(listing_id)), None)

    def search(self, query: str) -> List[dict]:
        listings = self.all()
        needle = (query or "").strip().lower()
        if not needle:
            return listings
        return [
            item for item in listings
            if needle in item.get("title", "").lower()
            or needle in item.get("short_description", "").lower()
        ]

    def add(
        self,
        title: str,
        short_description: str,
        full_details: str,
        apply_url: str,
        has_certification: bool = False,
    ) -> dict:
        listings = self.all()
        if len(listings) >= self.capacity:
            raise CapacityError(
                f"Maximum capacity reached ({self.capacity} listings). "
                "Please delete some listings first."
            )
        _validate(title, short_description, full_details, apply_url)
        listing = {
            "id": uuid.uuid4().hex,
            "title": title.strip(),
            "short_description": short_description.strip(),
            "full_details": full_details.strip(),
            "has_certification": bool(has_certification),
            "apply_url": apply_url.strip(),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        listings.append(listing)
        self._save(listings)
        return listing

    def update(self, listing_id: str, **changes) -> Optional[dict]:
        listings = self.all()
        for item in listings:
            if str(item.get("id")) == str(listing_id):
                merged = {**item, **changes}
                _validate(merged["title"], merged["short_description"],
                          merged["full_details"], merged["apply_url"])
                item.update(changes)
                item["updated_at"] = datetime.now(timezone.utc).isoformat()
                self._save(listings)
                return item
        return None

    def remove(self, listing_id: str) -> bool:
        listings = self.all()
        remaining = [item for item in listings if str(item.get("id")) != str(listing_id)]
        if len(remaining) == len(listings):
            return False
        self._save(remaining)
        return True

    def _save(self, listings: List[dict]) -> None:
        try:
            self.storage.set_item(LISTINGS_KEY, json.dumps(listings))
        except StorageUnavailable as exc:
            logger.warning("Could not save local listings: %s", exc)
