"""Hands out SQLAlchemy repositories that share one request session."""

from sqlalchemy.ext.asyncio import AsyncSession

from course_api.application.interfaces import (
    CommentRepository,
    RecordRepository,
    RepositoryFactory,
)
from course_api.domain.entities import ResourceDescriptor
from course_api.infrastructure.database.models import MODEL_REGISTRY

from .comment_repository import SQLAlchemyCommentRepository
from .record_repository import SQLAlchemyRecordRepository


class SQLAlchemyRepositoryFactory(RepositoryFactory):

    def __init__(self, session: AsyncSession):
        self._session = session

    def records(self, descriptor: ResourceDescriptor) -> RecordRepository:
        comment_model = None
        if descriptor.comments is not None:
            comment_model = MODEL_REGISTRY[descriptor.comments.table]
        return SQLAlchemyRecordRepository(
            self._session,
            descriptor,
            MODEL_REGISTRY[descriptor.table],
            comment_model,
        )

    def comments(self, descriptor: ResourceDescriptor) -> CommentRepository:
        if descriptor.comments is None:
            raise ValueError(f"{descriptor.name} has no comments")
        return SQLAlchemyCommentRepository(
            self._session,
            descriptor.comments,
            MODEL_REGISTRY[descriptor.comments.table],
        )
