"""
Database module - engine/pool handle and table definitions.
"""
from listingboard.db.postgres import Database, build_engine, get_database
from listingboard.db.tables import metadata, create_all

__all__ = [
    "Database",
    "build_engine",
    "get_database",
    "metadata",
    "create_all",
]
