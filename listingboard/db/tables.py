"""
Table definitions for the relational store.

Only used for DDL (scripts/setup_database.py and tests). Queries are
written as parameterized SQL in the services layer.
"""

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Index, MetaData, String, Table, Text,
    false,
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), unique=True, nullable=False),
    Column("password_hash", String(255), nullable=False),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("phone", String(50)),
    Column("role", String(20), nullable=False, server_default="user"),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

listings = Table(
    "listings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("title", String(255), nullable=False),
    Column("short_description", Text, nullable=False),
    Column("full_details", Text, nullable=False),
    Column("has_certification", Boolean, nullable=False, server_default=false()),
    Column("apply_url", String(500), nullable=False),
    Column("location", String(255)),
    Column("duration", String(100)),
    Column("deadline", Date),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    # Weak reference: listings outlive their creator
    Column("created_by", String(36), ForeignKey("users.id", ondelete="SET NULL")),
)

Index("idx_users_email", users.c.email)
Index("idx_listings_created_at", listings.c.created_at.desc())


def create_all(engine) -> None:
    """Create both tables and their indexes if missing."""
    metadata.create_all(engine)


def drop_all(engine) -> None:
    metadata.drop_all(engine)
