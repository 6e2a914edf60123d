"""In-memory fakes shared by the unit tests."""

from datetime import datetime, timezone
from typing import Any

import pytest

from course_api.application.interfaces import (
    CommentRepository,
    PasswordHasher,
    RecordRepository,
    RepositoryFactory,
)
from course_api.domain.entities import (
    Comment,
    KeyKind,
    ListQuery,
    ResourceDescriptor,
    ResourceRecord,
    SortOrder,
)
from course_api.domain.exceptions import DuplicateEntityError


class FakeHasher(PasswordHasher):
    """Reversible stand-in so tests can inspect what was stored."""

    def hash(self, plain_password: str) -> str:
        return f"hashed:{plain_password}"

    def verify(self, plain_password: str, password_hash: str) -> bool:
        return password_hash == f"hashed:{plain_password}"


class FakeRecordRepository(RecordRepository):
    """In-memory fake repository for unit testing."""

    def __init__(self, descriptor: ResourceDescriptor):
        self.descriptor = descriptor
        self.rows: dict[Any, dict[str, Any]] = {}
        self.secret_lookups = 0
        self.deleted_comment_parents: list[Any] = []
        self._next_id = 1

    def _record(self, row: dict[str, Any]) -> ResourceRecord:
        values = {name: row.get(name) for name in self.descriptor.visible_columns}
        for name, value in values.items():
            if hasattr(value, "isoformat"):
                values[name] = value.isoformat()
        return ResourceRecord(self.descriptor.name, row[self.descriptor.key_field], values)

    async def list(self, query: ListQuery) -> list[ResourceRecord]:
        rows = list(self.rows.values())
        if query.search:
            term = query.search.lower()
            rows = [
                r for r in rows
                if any(term in str(r.get(f) or "").lower() for f in self.descriptor.search_fields)
            ]
        rows.sort(key=lambda r: str(r.get(query.sort)), reverse=query.order is SortOrder.DESC)
        return [self._record(r) for r in rows]

    async def get(self, key):
        row = self.rows.get(key)
        return self._record(row) if row else None

    async def exists(self, key) -> bool:
        return key in self.rows

    async def find_conflict(self, values, exclude_key=None):
        for spec in self.descriptor.unique_fields:
            if spec.name not in values:
                continue
            for key, row in self.rows.items():
                if key != exclude_key and row.get(spec.name) == values[spec.name]:
                    return spec.name
        return None

    async def create(self, values):
        conflict = await self.find_conflict(values)
        if conflict:
            raise DuplicateEntityError(self.descriptor.label, conflict, values[conflict])
        row = dict(values)
        if self.descriptor.key_kind is KeyKind.SURROGATE:
            row["id"] = self._next_id
            self._next_id += 1
        row["created_at"] = datetime.now(timezone.utc)
        self.rows[row[self.descriptor.key_field]] = row
        return self._record(row)

    async def update(self, key, values) -> bool:
        row = self.rows[key]
        changed = any(row.get(name) != value for name, value in values.items())
        row.update(values)
        return changed

    async def delete(self, key) -> bool:
        if key not in self.rows:
            return False
        self.deleted_comment_parents.append(key)
        del self.rows[key]
        return True

    async def get_secret_hash(self, key):
        self.secret_lookups += 1
        row = self.rows.get(key)
        secret = self.descriptor.secret_field
        return row.get(secret.name) if row and secret else None

    async def set_secret_hash(self, key, secret_hash):
        self.rows[key][self.descriptor.secret_field.name] = secret_hash


class FakeCommentRepository(CommentRepository):

    def __init__(self, parent_field: str):
        self.parent_field = parent_field
        self.comments: dict[int, Comment] = {}
        self._next_id = 1

    async def list_by_parent(self, parent_key):
        return [c for c in self.comments.values() if c.parent_key == parent_key]

    async def get(self, comment_id):
        return self.comments.get(comment_id)

    async def create(self, comment):
        comment.id = self._next_id
        comment.created_at = datetime.now(timezone.utc)
        self._next_id += 1
        self.comments[comment.id] = comment
        return comment

    async def delete(self, comment_id) -> bool:
        return self.comments.pop(comment_id, None) is not None


class FakeRepositoryFactory(RepositoryFactory):
    """Keeps one fake per family so state survives across dispatches."""

    def __init__(self):
        self._records: dict[str, FakeRecordRepository] = {}
        self._comments: dict[str, FakeCommentRepository] = {}

    def records(self, descriptor):
        if descriptor.name not in self._records:
            self._records[descriptor.name] = FakeRecordRepository(descriptor)
        return self._records[descriptor.name]

    def comments(self, descriptor):
        if descriptor.name not in self._comments:
            self._comments[descriptor.name] = FakeCommentRepository(descriptor.comments.parent_field)
        return self._comments[descriptor.name]


@pytest.fixture
def hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture
def repositories() -> FakeRepositoryFactory:
    return FakeRepositoryFactory()
