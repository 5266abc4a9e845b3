"""
Repositories over aiosqlite
"""

from orderdesk.repositories.base import BaseRepository
from orderdesk.repositories.catalog_repository import CatalogRepository
from orderdesk.repositories.exceptions import (
    ConcurrencyConflict,
    EntityNotFoundError,
    RepositoryError,
)
from orderdesk.repositories.order_repository import OrderRepository
from orderdesk.repositories.override_repository import OverrideRepository


__all__ = [
    "BaseRepository",
    "CatalogRepository",
    "ConcurrencyConflict",
    "EntityNotFoundError",
    "OrderRepository",
    "OverrideRepository",
    "RepositoryError",
]
