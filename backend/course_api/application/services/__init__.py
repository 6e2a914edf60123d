from .record_service import RecordService
from .comment_service import CommentService
from .credential_service import CredentialService
from .request_router import RequestRouter

__all__ = [
    "RecordService",
    "CommentService",
    "CredentialService",
    "RequestRouter",
]
