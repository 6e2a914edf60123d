"""Application service for the verified change-credential workflow."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from course_api.application.interfaces import PasswordHasher, RecordRepository
from course_api.application.validation import (
    DEFAULT_MIN_SECRET_LENGTH,
    MAX_SECRET_BYTES,
    is_blank,
    missing_fields,
    parse_key,
)
from course_api.domain.entities import ResourceDescriptor
from course_api.domain.exceptions import (
    EntityNotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

CURRENT_SECRET_FIELD = "current_password"
NEW_SECRET_FIELD = "new_password"


class CredentialService:
    """Verifies the current password and rewrites the stored hash.

    Plaintext secrets are never logged, stored or returned.
    """

    def __init__(
        self,
        descriptor: ResourceDescriptor,
        records: RecordRepository,
        hasher: PasswordHasher,
        *,
        min_secret_length: int = DEFAULT_MIN_SECRET_LENGTH,
    ) -> None:
        if descriptor.secret_field is None:
            raise ValueError(f"{descriptor.name} has no credential")
        self._descriptor = descriptor
        self._records = records
        self._hasher = hasher
        self._min_secret_length = min_secret_length

    async def change_password(self, data: Mapping[str, Any], fallback_key: Any = None) -> None:
        d = self._descriptor
        raw_key = data.get(d.key_field)
        if is_blank(raw_key):
            raw_key = fallback_key

        missing = missing_fields(
            {**data, d.key_field: raw_key},
            (d.key_field, CURRENT_SECRET_FIELD, NEW_SECRET_FIELD),
        )
        if missing:
            raise ValidationError("Missing required fields", missing=missing)

        current = data[CURRENT_SECRET_FIELD]
        new = data[NEW_SECRET_FIELD]
        if not isinstance(current, str) or not isinstance(new, str):
            raise ValidationError("Passwords must be strings")

        # Policy check happens before the store is touched
        if len(new) < self._min_secret_length:
            raise ValidationError(
                f"New password must be at least {self._min_secret_length} characters"
            )
        if len(new.encode("utf-8")) > MAX_SECRET_BYTES:
            raise ValidationError(f"New password must be at most {MAX_SECRET_BYTES} bytes")

        key = parse_key(d, raw_key)
        stored_hash = await self._records.get_secret_hash(key)
        if stored_hash is None:
            raise EntityNotFoundError(d.label, key)

        if not await asyncio.to_thread(self._hasher.verify, current, stored_hash):
            logger.warning("Rejected password change for %s '%s': current password mismatch", d.label, key)
            raise UnauthorizedError("Incorrect current password")

        new_hash = await asyncio.to_thread(self._hasher.hash, new)
        await self._records.set_secret_hash(key, new_hash)
        logger.info("Password changed for %s '%s'", d.label, key)
