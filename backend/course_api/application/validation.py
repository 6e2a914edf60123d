"""Input sanitizing and validation shared by every resource family.

Free text is trimmed, stripped of markup and HTML-escaped before it is
stored. Emails and URLs go through pydantic's validators; dates must be
exact ``YYYY-MM-DD`` strings.
"""

import html
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from pydantic import EmailStr, HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from course_api.domain.entities import (
    FieldKind,
    FieldSpec,
    KeyKind,
    ListQuery,
    ResourceDescriptor,
    SortOrder,
)
from course_api.domain.exceptions import ValidationError

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_MIN_SECRET_LENGTH = 8
# bcrypt only consumes the first 72 bytes of a secret
MAX_SECRET_BYTES = 72

_EMAIL_ADAPTER = TypeAdapter(EmailStr)
_URL_ADAPTER = TypeAdapter(HttpUrl)

_SCRIPT_RE = re.compile(r"(?is)<(script|style)[^>]*>.*?</\1\s*>")
_TAG_RE = re.compile(r"(?s)<[^>]*>")


# ── Sanitizers ───────────────────────────────────────────────────────


def strip_markup(value: str) -> str:
    """Remove HTML tags (and script/style bodies) from ``value``."""
    cleaned = _SCRIPT_RE.sub("", value)
    return _TAG_RE.sub("", cleaned)


def sanitize_text(value: Any) -> str:
    """Trim, strip markup and escape a free-text value."""
    text = str(value).strip()
    return html.escape(strip_markup(text).strip(), quote=True)


# ── Format validators ────────────────────────────────────────────────


def is_valid_email(value: str) -> bool:
    try:
        _EMAIL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def is_valid_url(value: str) -> bool:
    try:
        _URL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def parse_date(value: str) -> date | None:
    """Parse an exact ``YYYY-MM-DD`` string; anything that does not round-trip is rejected."""
    try:
        parsed = datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        return None
    if parsed.strftime(DATE_FORMAT) != value:
        return None
    return parsed


def is_valid_date(value: str) -> bool:
    return parse_date(value) is not None


def choose(value: str | None, allowed: Iterable[str], default: str) -> str:
    """Return ``value`` if it is allow-listed, otherwise ``default``."""
    if value is None:
        return default
    candidate = value.strip()
    return candidate if candidate in set(allowed) else default


# ── Field-level cleaning ─────────────────────────────────────────────


def is_blank(value: Any) -> bool:
    """True for values treated as absent: None, blank strings, empty lists."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def missing_fields(data: Mapping[str, Any], names: Iterable[str]) -> list[str]:
    return [name for name in names if is_blank(data.get(name))]


def clean_value(
    spec: FieldSpec,
    raw: Any,
    *,
    min_secret_length: int = DEFAULT_MIN_SECRET_LENGTH,
) -> Any:
    """Sanitize and validate one field value according to its kind.

    Returns the value ready to persist (``date`` for dates, ``list[str]`` for lists).
    Raises ``ValidationError`` on malformed input.
    """
    if spec.kind is FieldKind.LIST:
        return _clean_list(spec, raw)

    if isinstance(raw, (dict, list, tuple, bool)):
        raise ValidationError(f"Invalid {spec.name}")

    if spec.kind is FieldKind.SECRET:
        if not isinstance(raw, str):
            raise ValidationError(f"Invalid {spec.name}")
        if len(raw) < min_secret_length:
            raise ValidationError(
                f"{spec.name.capitalize()} must be at least {min_secret_length} characters"
            )
        if len(raw.encode("utf-8")) > MAX_SECRET_BYTES:
            raise ValidationError(f"{spec.name.capitalize()} must be at most {MAX_SECRET_BYTES} bytes")
        return raw

    if spec.kind is FieldKind.EMAIL:
        value = str(raw).strip()
        if not is_valid_email(value):
            raise ValidationError("Invalid email format")
    elif spec.kind is FieldKind.URL:
        value = str(raw).strip()
        if not is_valid_url(value):
            raise ValidationError("Invalid URL")
    elif spec.kind is FieldKind.DATE:
        parsed = parse_date(str(raw).strip())
        if parsed is None:
            raise ValidationError(f"Invalid {spec.name} format. Expected YYYY-MM-DD")
        return parsed
    else:
        value = sanitize_text(raw)

    if spec.max_length is not None and len(value) > spec.max_length:
        raise ValidationError(f"{spec.name} must be at most {spec.max_length} characters")
    return value


def _clean_list(spec: FieldSpec, raw: Any) -> list[str]:
    if not isinstance(raw, (list, tuple)):
        raise ValidationError(f"{spec.name} must be a list")
    items: list[str] = []
    for item in raw:
        if isinstance(item, (dict, list, tuple, bool)) or item is None:
            raise ValidationError(f"{spec.name} must be a list of strings")
        cleaned = strip_markup(str(item).strip()).strip()
        if cleaned:
            items.append(cleaned)
    return items


def clean_fields(
    specs: Iterable[FieldSpec],
    data: Mapping[str, Any],
    *,
    min_secret_length: int = DEFAULT_MIN_SECRET_LENGTH,
) -> dict[str, Any]:
    """Clean every non-blank field of ``data`` named by ``specs``; blank ones are skipped."""
    values: dict[str, Any] = {}
    for spec in specs:
        raw = data.get(spec.name)
        if is_blank(raw):
            continue
        values[spec.name] = clean_value(spec, raw, min_secret_length=min_secret_length)
    return values


# ── Listing options ──────────────────────────────────────────────────


def parse_list_query(descriptor: ResourceDescriptor, query: Mapping[str, str]) -> ListQuery:
    """Validate search/sort/order; invalid sort or order falls back to the family default."""
    sort = choose(query.get("sort"), descriptor.sort_columns.keys(), descriptor.default_sort)
    raw_order = query.get("order")
    order = choose(
        raw_order.lower() if raw_order else None,
        (o.value for o in SortOrder),
        descriptor.default_order.value,
    )

    search = query.get("search")
    term = sanitize_text(search) if search is not None else ""
    return ListQuery(sort=sort, order=SortOrder(order), search=term or None)


def parse_key(descriptor: ResourceDescriptor, raw: Any) -> int | str:
    """Turn a caller-supplied identifier into a lookup key (400 on bad format)."""
    if descriptor.key_kind is KeyKind.NATURAL and isinstance(raw, str):
        raw = sanitize_text(raw)
    return descriptor.coerce_key(raw)
