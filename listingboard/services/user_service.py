"""
User Service - data access for the users table.

Emails are stored case-folded; every lookup folds its input the same way.
Rows are returned as plain dicts without the password hash unless asked.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from listingboard.core.errors import ConflictError, StorageError
from listingboard.db.postgres import Database

PUBLIC_COLUMNS = "id, email, first_name, last_name, phone, role, created_at"


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the TIMESTAMP columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def public_user(row: dict) -> dict:
    """Strip the hash and add the display name."""
    user = {k: v for k, v in row.items() if k != "password_hash"}
    user["name"] = f"{row['first_name']} {row['last_name']}"
    return user


class UserService:
    """Handles user rows. One scoped session per call."""

    def __init__(self, database: Database):
        self.database = database

    def get_by_email(self, email: str, include_hash: bool = False) -> Optional[dict]:
        columns = PUBLIC_COLUMNS + (", password_hash" if include_hash else "")
        with self.database.session() as db:
            row = db.execute(
                text(f"SELECT {columns} FROM users WHERE email = :email"),
                {"email": email.strip().lower()},
            ).mappings().fetchone()
        return dict(row) if row else None

    def get_by_id(self, user_id: str) -> Optional[dict]:
        with self.database.session() as db:
            row = db.execute(
                text(f"SELECT {PUBLIC_COLUMNS} FROM users WHERE id = :id"),
                {"id": user_id},
            ).mappings().fetchone()
        return dict(row) if row else None

    def exists(self, user_id: str) -> bool:
        return self.get_by_id(user_id) is not None

    def create(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        role: str = "user",
    ) -> dict:
        """
        Insert a user.

        Raises ConflictError if the email is taken, either by the pre-check or
        by the UNIQUE constraint when two signups race.
        """
        email = email.strip().lower()
        now = utcnow()
        user = {
            "id": str(uuid.uuid4()),
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "phone": phone or None,
            "role": role,
            "created_at": now,
        }
        try:
            with self.database.session() as db:
                existing = db.execute(
                    text("SELECT id FROM users WHERE email = :email"),
                    {"email": email},
                ).fetchone()
                if existing:
                    raise ConflictError("Email already registered")

                db.execute(
                    text("""
                        INSERT INTO users (id, email, password_hash, first_name, last_name,
                            phone, role, created_at, updated_at)
                        VALUES (:id, :email, :password_hash, :first_name, :last_name,
                            :phone, :role, :created_at, :updated_at)
                    """),
                    {**user, "password_hash": password_hash, "updated_at": now},
                )
        except StorageError as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise ConflictError("Email already registered") from exc
            raise
        return user

    def count(self) -> int:
        with self.database.session() as db:
            return db.execute(text("SELECT COUNT(*) FROM users")).scalar_one()
