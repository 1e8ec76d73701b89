"""Database layer for freeboard application."""

from freeboard.database.base import Database
from freeboard.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
