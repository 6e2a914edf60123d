from .comment_repository import SQLAlchemyCommentRepository
from .record_repository import SQLAlchemyRecordRepository
from .repository_factory import SQLAlchemyRepositoryFactory

__all__ = [
    "SQLAlchemyCommentRepository",
    "SQLAlchemyRecordRepository",
    "SQLAlchemyRepositoryFactory",
]
