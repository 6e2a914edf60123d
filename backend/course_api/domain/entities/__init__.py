from .descriptor import (
    CommentCollection,
    FieldKind,
    FieldSpec,
    KeyKind,
    ResourceDescriptor,
    SortOrder,
    parse_row_id,
)
from .record import Comment, ListQuery, ResourceRecord
from .gateway import AuthContext, GatewayRequest, GatewayResponse

__all__ = [
    "CommentCollection",
    "FieldKind",
    "FieldSpec",
    "KeyKind",
    "ResourceDescriptor",
    "SortOrder",
    "parse_row_id",
    "Comment",
    "ListQuery",
    "ResourceRecord",
    "AuthContext",
    "GatewayRequest",
    "GatewayResponse",
]
