"""Concrete record repository backed by SQLAlchemy Core statements."""

import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from course_api.application.interfaces import RecordRepository
from course_api.domain.entities import ListQuery, ResourceDescriptor, ResourceRecord
from course_api.domain.exceptions import DuplicateEntityError
from course_api.infrastructure.database.base import Base
from course_api.infrastructure.database.codecs import decode_list, encode_list
from course_api.infrastructure.database.query_builder import QueryBuilder, delete_comments

logger = logging.getLogger(__name__)


class SQLAlchemyRecordRepository(RecordRepository):
    """Implements the RecordRepository port for any descriptor-driven table.

    Writes run inside a SAVEPOINT so a constraint violation only rolls back
    the failed statement, not the caller's whole transaction.
    """

    def __init__(
        self,
        session: AsyncSession,
        descriptor: ResourceDescriptor,
        model: type[Base],
        comment_model: type[Base] | None = None,
    ):
        self._session = session
        self.descriptor = descriptor
        self._queries = QueryBuilder(descriptor, model.__table__)
        self._comment_table = comment_model.__table__ if comment_model is not None else None

    # ── Mapping ──────────────────────────────────────────────────────

    def _encode(self, values: dict[str, Any]) -> dict[str, Any]:
        """Map validated values → column values."""
        list_fields = self.descriptor.list_fields
        return {
            name: encode_list(value) if name in list_fields else value
            for name, value in values.items()
        }

    def _to_entity(self, row) -> ResourceRecord:
        """Map a result row → domain record."""
        list_fields = self.descriptor.list_fields
        values: dict[str, Any] = {}
        for name, value in row.items():
            if name in list_fields:
                value = decode_list(value)
            elif isinstance(value, (date, datetime)):
                value = value.isoformat()
            values[name] = value
        return ResourceRecord(
            resource=self.descriptor.name,
            key=values[self.descriptor.key_field],
            values=values,
        )

    async def _raise_duplicate(
        self,
        exc: IntegrityError,
        values: dict[str, Any],
        exclude_key: int | str | None = None,
    ) -> None:
        conflict = await self.find_conflict(values, exclude_key=exclude_key)
        if conflict is None:
            message = str(exc.orig).lower()
            conflict = next(
                (f.name for f in self.descriptor.unique_fields
                 if f.name in values and f.name in message),
                None,
            )
        if conflict is None:
            raise exc
        logger.info("Rejected duplicate %s %s", self.descriptor.label, conflict)
        raise DuplicateEntityError(self.descriptor.label, conflict, str(values[conflict])) from exc

    # ── Reads ────────────────────────────────────────────────────────

    async def list(self, query: ListQuery) -> list[ResourceRecord]:
        result = await self._session.execute(self._queries.select_list(query))
        return [self._to_entity(row) for row in result.mappings().all()]

    async def get(self, key: int | str) -> ResourceRecord | None:
        result = await self._session.execute(self._queries.select_one(key))
        row = result.mappings().first()
        return self._to_entity(row) if row else None

    async def exists(self, key: int | str) -> bool:
        result = await self._session.execute(self._queries.select_exists(key))
        return bool(result.scalar())

    async def find_conflict(
        self,
        values: dict[str, Any],
        exclude_key: int | str | None = None,
    ) -> str | None:
        for spec in self.descriptor.unique_fields:
            if spec.name not in values:
                continue
            stmt = self._queries.select_conflict(spec.name, values[spec.name], exclude_key)
            result = await self._session.execute(stmt)
            if result.first() is not None:
                return spec.name
        return None

    async def get_secret_hash(self, key: int | str) -> str | None:
        result = await self._session.execute(self._queries.select_secret(key))
        return result.scalar_one_or_none()

    # ── Writes ───────────────────────────────────────────────────────

    async def create(self, values: dict[str, Any]) -> ResourceRecord:
        try:
            async with self._session.begin_nested():
                result = await self._session.execute(self._queries.insert(self._encode(values)))
        except IntegrityError as exc:
            await self._raise_duplicate(exc, values)

        key = values.get(self.descriptor.key_field)
        if key is None:
            key = result.inserted_primary_key[0]
        record = await self.get(key)
        if record is None:
            raise RuntimeError(f"{self.descriptor.label} '{key}' vanished after insert")
        return record

    async def update(self, key: int | str, values: dict[str, Any]) -> bool:
        columns = list(values)
        result = await self._session.execute(self._queries.select_stored(key, columns))
        stored = result.mappings().first()
        if stored is None:
            return False

        list_fields = self.descriptor.list_fields
        changed = any(
            (decode_list(stored[name]) if name in list_fields else stored[name]) != value
            for name, value in values.items()
        )
        if not changed:
            return False

        try:
            async with self._session.begin_nested():
                await self._session.execute(self._queries.update(key, self._encode(values)))
        except IntegrityError as exc:
            await self._raise_duplicate(exc, values, exclude_key=key)
        return True

    async def delete(self, key: int | str) -> bool:
        if not await self.exists(key):
            return False

        async with self._session.begin_nested():
            if self._comment_table is not None and self.descriptor.comments is not None:
                await self._session.execute(
                    delete_comments(self._comment_table, self.descriptor.comments.parent_field, key)
                )
            result = await self._session.execute(self._queries.delete(key))
        return result.rowcount > 0

    async def set_secret_hash(self, key: int | str, secret_hash: str) -> None:
        secret = self.descriptor.secret_field
        if secret is None:
            raise ValueError(f"{self.descriptor.name} has no credential column")
        await self._session.execute(self._queries.update(key, {secret.name: secret_hash}))
