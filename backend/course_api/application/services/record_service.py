"""Application service (use case) for generic resource record CRUD."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from course_api.application.interfaces import PasswordHasher, RecordRepository
from course_api.application.validation import (
    DEFAULT_MIN_SECRET_LENGTH,
    clean_fields,
    is_blank,
    missing_fields,
    parse_key,
    parse_list_query,
)
from course_api.domain.entities import ResourceDescriptor, ResourceRecord
from course_api.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class RecordService:
    """Orchestrates create/read/update/delete for one resource family.

    All family-specific behaviour comes from the descriptor; the repository
    port is injected (DI) so the service runs against fakes in unit tests.
    """

    def __init__(
        self,
        descriptor: ResourceDescriptor,
        repository: RecordRepository,
        hasher: PasswordHasher | None = None,
        *,
        min_secret_length: int = DEFAULT_MIN_SECRET_LENGTH,
    ) -> None:
        self._descriptor = descriptor
        self._repository = repository
        self._hasher = hasher
        self._min_secret_length = min_secret_length

    async def list_records(self, query: Mapping[str, str]) -> list[ResourceRecord]:
        return await self._repository.list(parse_list_query(self._descriptor, query))

    async def get_record(self, raw_key: Any) -> ResourceRecord:
        key = parse_key(self._descriptor, raw_key)
        record = await self._repository.get(key)
        if record is None:
            raise EntityNotFoundError(self._descriptor.label, key)
        return record

    async def create_record(self, data: Mapping[str, Any]) -> ResourceRecord:
        d = self._descriptor
        required = [f.name for f in d.required_fields]

        missing = missing_fields(data, required)
        if missing:
            raise ValidationError("Missing required fields", missing=missing)

        values = clean_fields(d.fields, data, min_secret_length=self._min_secret_length)
        # Markup-only input sanitizes down to nothing
        emptied = [name for name in required if is_blank(values.get(name))]
        if emptied:
            raise ValidationError("Missing required fields", missing=emptied)

        conflict = await self._repository.find_conflict(values)
        if conflict is not None:
            raise DuplicateEntityError(d.label, conflict, str(values[conflict]))

        secret = d.secret_field
        if secret is not None:
            # Hashing runs off the event loop
            values[secret.name] = await asyncio.to_thread(
                self._require_hasher().hash, values[secret.name]
            )

        record = await self._repository.create(values)
        logger.info("Created %s '%s'", d.label, record.key)
        return record

    async def update_record(
        self,
        data: Mapping[str, Any],
        fallback_key: Any = None,
    ) -> ResourceRecord:
        """Partial update — only fields present and non-empty in ``data`` are written."""
        d = self._descriptor
        raw_key = data.get(d.key_field)
        if is_blank(raw_key):
            raw_key = fallback_key
        key = parse_key(d, raw_key)

        if not await self._repository.exists(key):
            raise EntityNotFoundError(d.label, key)

        values = clean_fields(d.updatable_fields, data)
        if not values:
            raise ValidationError("No fields to update")

        unique_values = {
            name: value for name, value in values.items()
            if (spec := d.get_field(name)) is not None and spec.unique
        }
        if unique_values:
            conflict = await self._repository.find_conflict(unique_values, exclude_key=key)
            if conflict is not None:
                raise DuplicateEntityError(d.label, conflict, str(values[conflict]))

        changed = await self._repository.update(key, values)
        if changed:
            logger.info("Updated %s '%s' fields=%s", d.label, key, sorted(values))
        else:
            logger.info("Update of %s '%s' left values unchanged", d.label, key)

        record = await self._repository.get(key)
        if record is None:
            raise EntityNotFoundError(d.label, key)
        return record

    async def delete_record(self, raw_key: Any) -> None:
        d = self._descriptor
        key = parse_key(d, raw_key)
        deleted = await self._repository.delete(key)
        if not deleted:
            raise EntityNotFoundError(d.label, key)
        logger.info("Deleted %s '%s'", d.label, key)

    def _require_hasher(self) -> PasswordHasher:
        if self._hasher is None:
            raise RuntimeError(f"{self._descriptor.label} has a credential but no password hasher")
        return self._hasher
