"""Abstract repository interface (port) for resource record persistence."""

from abc import ABC, abstractmethod
from typing import Any

from course_api.domain.entities import ListQuery, ResourceDescriptor, ResourceRecord


class RecordRepository(ABC):
    """Port for one resource family — implemented in the infrastructure layer.

    Values passed in are already sanitized and validated; list fields are
    plain Python lists and dates are ``datetime.date`` objects.
    """

    descriptor: ResourceDescriptor

    @abstractmethod
    async def list(self, query: ListQuery) -> list[ResourceRecord]:
        """Return every record matching the search term, in the requested order."""
        ...

    @abstractmethod
    async def get(self, key: int | str) -> ResourceRecord | None:
        """Retrieve a single record by its identifying key."""
        ...

    @abstractmethod
    async def exists(self, key: int | str) -> bool:
        ...

    @abstractmethod
    async def find_conflict(
        self,
        values: dict[str, Any],
        exclude_key: int | str | None = None,
    ) -> str | None:
        """Return the first unique field whose value is already taken, or None."""
        ...

    @abstractmethod
    async def create(self, values: dict[str, Any]) -> ResourceRecord:
        """Insert a record and return it with its key.

        Raises ``DuplicateEntityError`` when a uniqueness constraint rejects the row.
        """
        ...

    @abstractmethod
    async def update(self, key: int | str, values: dict[str, Any]) -> bool:
        """Apply a partial update. Returns True if any stored value actually changed.

        Raises ``DuplicateEntityError`` when a uniqueness constraint rejects the change.
        """
        ...

    @abstractmethod
    async def delete(self, key: int | str) -> bool:
        """Delete a record together with its dependent comments, atomically.

        Returns True if deleted, False if not found.
        """
        ...

    @abstractmethod
    async def get_secret_hash(self, key: int | str) -> str | None:
        """Return the stored credential hash, or None if the record does not exist."""
        ...

    @abstractmethod
    async def set_secret_hash(self, key: int | str, secret_hash: str) -> None:
        ...
