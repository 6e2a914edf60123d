"""Application service for comments scoped to a parent resource record."""

import logging
from collections.abc import Mapping
from typing import Any

from course_api.application.interfaces import CommentRepository, RecordRepository
from course_api.application.validation import (
    is_blank,
    missing_fields,
    parse_key,
    sanitize_text,
)
from course_api.domain.entities import Comment, ResourceDescriptor, parse_row_id
from course_api.domain.exceptions import EntityNotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_AUTHOR_LENGTH = 100


class CommentService:
    """List, create and delete comments of one resource family."""

    def __init__(
        self,
        descriptor: ResourceDescriptor,
        comments: CommentRepository,
        records: RecordRepository,
    ) -> None:
        if descriptor.comments is None:
            raise ValueError(f"{descriptor.name} has no comment collection")
        self._descriptor = descriptor
        self._parent_field = descriptor.comments.parent_field
        self._comments = comments
        self._records = records

    def parent_from(self, source: Mapping[str, Any]) -> Any:
        """Parent key as sent by the caller — generic ``parent`` or the family alias."""
        value = source.get("parent")
        if is_blank(value):
            value = source.get(self._parent_field)
        return value

    async def list_comments(self, raw_parent: Any) -> list[Comment]:
        if is_blank(raw_parent):
            raise ValidationError(f"{self._parent_field} is required")
        parent_key = parse_key(self._descriptor, raw_parent)
        return await self._comments.list_by_parent(parent_key)

    async def create_comment(self, data: Mapping[str, Any]) -> Comment:
        raw_parent = self.parent_from(data)
        fields = {self._parent_field: raw_parent, "author": data.get("author"), "text": data.get("text")}
        missing = missing_fields(fields, fields.keys())
        if missing:
            raise ValidationError("Missing required fields", missing=missing)

        if isinstance(fields["author"], (dict, list)) or isinstance(fields["text"], (dict, list)):
            raise ValidationError("Invalid comment")
        author = sanitize_text(fields["author"])
        text = sanitize_text(fields["text"])
        emptied = [name for name, value in (("author", author), ("text", text)) if not value]
        if emptied:
            raise ValidationError("Missing required fields", missing=emptied)
        if len(author) > MAX_AUTHOR_LENGTH:
            raise ValidationError(f"author must be at most {MAX_AUTHOR_LENGTH} characters")

        parent_key = parse_key(self._descriptor, raw_parent)
        if not await self._records.exists(parent_key):
            raise EntityNotFoundError(self._descriptor.label, parent_key)

        comment = await self._comments.create(
            Comment(
                parent_field=self._parent_field,
                parent_key=parent_key,
                author=author,
                text=text,
            )
        )
        logger.info("Added comment %s to %s '%s'", comment.id, self._descriptor.label, parent_key)
        return comment

    async def delete_comment(self, raw_id: Any) -> None:
        if is_blank(raw_id):
            raise ValidationError("Comment id is required")
        text = str(raw_id).strip()
        comment_id = parse_row_id(text)
        if comment_id is None:
            raise ValidationError("Invalid comment id")

        if await self._comments.get(comment_id) is None:
            raise EntityNotFoundError("Comment", comment_id)
        await self._comments.delete(comment_id)
        logger.info("Deleted comment %s of %s", comment_id, self._descriptor.label)
