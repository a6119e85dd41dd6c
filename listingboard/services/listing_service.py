"""
Listing Service - CRUD operations for the listings table.

Each public method runs inside exactly one scoped session, so a call either
writes once and commits or rolls back and releases its connection.
No retries: storage failures propagate as StorageError.
"""

import uuid
from typing import List, Optional

from sqlalchemy import text

from listingboard.core.errors import ConflictError, NotFoundError, ValidationError
from listingboard.core.logging_config import get_logger
from listingboard.db.postgres import Database
from listingboard.schemas.schemas import ListingUpdate, ListingWrite
from listingboard.services.user_service import utcnow

logger = get_logger(__name__)

LISTING_COLUMNS = """
    id, title, short_description, full_details, has_certification, apply_url,
    location, duration, deadline, created_at, updated_at, created_by
"""


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ListingService:
    """Handles listing rows."""

    def __init__(self, database: Database, max_listings: Optional[int] = None):
        self.database = database
        self.max_listings = max_listings

    def list_all(self, search: Optional[str] = None) -> List[dict]:
        """All listings, newest first. `search` matches title or short description literally."""
        sql = f"SELECT {LISTING_COLUMNS} FROM listings"
        params = {}
        if search and search.strip():
            sql += (
                " WHERE LOWER(title) LIKE :q ESCAPE '\\'"
                " OR LOWER(short_description) LIKE :q ESCAPE '\\'"
            )
            params["q"] = f"%{_escape_like(search.strip().lower())}%"
        sql += " ORDER BY created_at DESC"

        with self.database.session() as db:
            rows = db.execute(text(sql), params).mappings().fetchall()
        return [dict(r) for r in rows]

    def get(self, listing_id: str) -> dict:
        with self.database.session() as db:
            row = self._fetch(db, listing_id)
        if row is None:
            raise NotFoundError("Listing not found")
        return row

    def count(self) -> int:
        with self.database.session() as db:
            return db.execute(text("SELECT COUNT(*) FROM listings")).scalar_one()

    def create(self, data: ListingWrite, created_by: Optional[str] = None) -> dict:
        listing_id = str(uuid.uuid4())
        now = utcnow()
        creator = data.created_by or created_by

        with self.database.session() as db:
            if self.max_listings is not None:
                total = db.execute(text("SELECT COUNT(*) FROM listings")).scalar_one()
                if total >= self.max_listings:
                    raise ConflictError(
                        f"Maximum capacity reached ({self.max_listings} listings). "
                        "Please delete some listings first."
                    )
            if creator is not None:
                self._check_creator(db, creator)

            db.execute(
                text("""
                    INSERT INTO listings (id, title, short_description, full_details,
                        has_certification, apply_url, location, duration, deadline,
                        created_at, updated_at, created_by)
                    VALUES (:id, :title, :short_description, :full_details,
                        :has_certification, :apply_url, :location, :duration, :deadline,
                        :created_at, :updated_at, :created_by)
                """),
                {
                    **self._field_params(data),
                    "id": listing_id,
                    "created_at": now,
                    "updated_at": now,
                    "created_by": creator,
                },
            )
            row = self._fetch(db, listing_id)

        logger.info("Listing created: id=%s title=%r", listing_id, data.title)
        return row

    def update(self, listing_id: str, data: ListingUpdate) -> dict:
        """Replace every editable field. The creator reference is left untouched."""
        with self.database.session() as db:
            result = db.execute(
                text("""
                    UPDATE listings
                    SET title = :title, short_description = :short_description,
                        full_details = :full_details, has_certification = :has_certification,
                        apply_url = :apply_url, location = :location, duration = :duration,
                        deadline = :deadline, updated_at = :updated_at
                    WHERE id = :id
                """),
                {**self._field_params(data), "id": listing_id, "updated_at": utcnow()},
            )
            if result.rowcount == 0:
                raise NotFoundError("Listing not found")
            row = self._fetch(db, listing_id)

        logger.info("Listing updated: id=%s", listing_id)
        return row

    def delete(self, listing_id: str) -> None:
        with self.database.session() as db:
            result = db.execute(
                text("DELETE FROM listings WHERE id = :id"),
                {"id": listing_id},
            )
            if result.rowcount == 0:
                raise NotFoundError("Listing not found")
        logger.info("Listing deleted: id=%s", listing_id)

    # ------------------------------------------------------------

    @staticmethod
    def _field_params(data: ListingUpdate) -> dict:
        return {
            "title": data.title,
            "short_description": data.short_description,
            "full_details": data.full_details,
            "has_certification": bool(data.has_certification),
            "apply_url": data.apply_url,
            "location": data.location,
            "duration": data.duration,
            "deadline": data.deadline,
        }

    @staticmethod
    def _fetch(db, listing_id: str) -> Optional[dict]:
        row = db.execute(
            text(f"SELECT {LISTING_COLUMNS} FROM listings WHERE id = :id"),
            {"id": listing_id},
        ).mappings().fetchone()
        return dict(row) if row else None

    @staticmethod
    def _check_creator(db, user_id: str) -> None:
        found = db.execute(
            text("SELECT id FROM users WHERE id = :id"),
            {"id": user_id},
        ).fetchone()
        if not found:
            raise ValidationError("Unknown creator")
