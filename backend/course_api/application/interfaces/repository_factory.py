"""Abstract factory handing out repositories bound to one unit of work."""

from abc import ABC, abstractmethod

from course_api.domain.entities import ResourceDescriptor

from .comment_repository import CommentRepository
from .record_repository import RecordRepository


class RepositoryFactory(ABC):
    """Builds per-family repositories that share the caller's session/transaction."""

    @abstractmethod
    def records(self, descriptor: ResourceDescriptor) -> RecordRepository:
        ...

    @abstractmethod
    def comments(self, descriptor: ResourceDescriptor) -> CommentRepository:
        """Comment repository of ``descriptor``; only valid for families with comments."""
        ...
