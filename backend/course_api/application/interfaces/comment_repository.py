"""Abstract repository interface (port) for discussion comments."""

from abc import ABC, abstractmethod

from course_api.domain.entities import Comment


class CommentRepository(ABC):
    """Port for the comment table of one resource family."""

    @abstractmethod
    async def list_by_parent(self, parent_key: int | str) -> list[Comment]:
        """Comments of one parent, oldest first."""
        ...

    @abstractmethod
    async def get(self, comment_id: int) -> Comment | None:
        ...

    @abstractmethod
    async def create(self, comment: Comment) -> Comment:
        """Persist a comment and return it with its generated id."""
        ...

    @abstractmethod
    async def delete(self, comment_id: int) -> bool:
        """Delete a comment. Returns True if deleted, False if not found."""
        ...
