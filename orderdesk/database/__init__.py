"""
Database package: SQLite connection, schema and catalog records
"""

from orderdesk.database.db import Database
from orderdesk.database.models import Customer, Product, Store


def get_database(db_path: str | None = None) -> Database:
    """
    Factory for Database instances

    Use this instead of calling Database() directly in services.
    """
    return Database(db_path)


__all__ = ["Customer", "Database", "Product", "Store", "get_database"]
