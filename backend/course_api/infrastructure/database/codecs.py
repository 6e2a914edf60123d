"""Encoding of list-valued fields into text columns."""

import json
import logging

logger = logging.getLogger(__name__)


def encode_list(items: list[str] | None) -> str:
    return json.dumps(list(items or []))


def decode_list(raw: str | None) -> list[str]:
    """Decode a stored list column; unreadable content decodes to an empty list."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding undecodable list column value")
        return []
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]
