"""Database layer for deductit application."""

from deductit.database.base import Database
from deductit.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
