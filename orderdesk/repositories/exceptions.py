"""
Repository exceptions
"""

from orderdesk.domain.exceptions import OrderDeskError


class RepositoryError(OrderDeskError):
    """Base class for repository errors"""


class ConcurrencyConflict(RepositoryError):
    """
    Version mismatch on save (optimistic locking)

    The record was changed by another writer between load and save.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: int,
        expected_version: int,
        actual_version: int | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        message = (
            f"{entity_type} #{entity_id} was modified by another process "
            f"(expected version {expected_version}"
        )
        if actual_version is not None:
            message += f", found {actual_version}"
        super().__init__(message + "). Please reload and try again.")


class EntityNotFoundError(RepositoryError):
    """Record does not exist"""

    def __init__(self, entity_type: str, entity_id: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} #{entity_id} not found")
