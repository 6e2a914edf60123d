from .record_repository import RecordRepository
from .comment_repository import CommentRepository
from .password_hasher import PasswordHasher
from .repository_factory import RepositoryFactory

__all__ = [
    "RecordRepository",
    "CommentRepository",
    "PasswordHasher",
    "RepositoryFactory",
]
