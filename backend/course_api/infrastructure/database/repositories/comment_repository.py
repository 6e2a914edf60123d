"""Concrete comment repository implementation backed by SQLAlchemy."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from course_api.application.interfaces import CommentRepository
from course_api.domain.entities import Comment, CommentCollection


class SQLAlchemyCommentRepository(CommentRepository):
    """Implements the CommentRepository port for one comment table."""

    def __init__(self, session: AsyncSession, collection: CommentCollection, model):
        self._session = session
        self._collection = collection
        self._model = model
        self._parent_column = getattr(model, collection.parent_field)

    def _to_entity(self, model) -> Comment:
        """Map ORM model → domain entity."""
        return Comment(
            parent_field=self._collection.parent_field,
            parent_key=getattr(model, self._collection.parent_field),
            author=model.author,
            text=model.text,
            id=model.id,
            created_at=model.created_at,
        )

    async def list_by_parent(self, parent_key: int | str) -> list[Comment]:
        stmt = (
            select(self._model)
            .where(self._parent_column == parent_key)
            .order_by(self._model.created_at.asc(), self._model.id.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def get(self, comment_id: int) -> Comment | None:
        result = await self._session.get(self._model, comment_id)
        return self._to_entity(result) if result else None

    async def create(self, comment: Comment) -> Comment:
        model = self._model(
            author=comment.author,
            text=comment.text,
            **{self._collection.parent_field: comment.parent_key},
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, comment_id: int) -> bool:
        model = await self._session.get(self._model, comment_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True
