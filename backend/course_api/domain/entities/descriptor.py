"""Resource descriptors — data-driven configuration for the generic CRUD engine.

Each resource family (students, assignments, ...) is described once by a
``ResourceDescriptor``; repositories, services and the request router read
everything family-specific from it.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from course_api.domain.exceptions import ValidationError

# Largest value a 32-bit INTEGER id column holds
MAX_ROW_ID = 2**31 - 1


def parse_row_id(text: str) -> int | None:
    """Parse an unsigned decimal row id; None when malformed or out of range."""
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    return value if value <= MAX_ROW_ID else None


class FieldKind(str, Enum):
    """How a field is sanitized, validated and persisted."""

    TEXT = "text"
    EMAIL = "email"
    URL = "url"
    DATE = "date"
    LIST = "list"
    SECRET = "secret"


class KeyKind(str, Enum):
    """Whether records are addressed by a caller-supplied string or a server-assigned integer."""

    NATURAL = "natural"
    SURROGATE = "surrogate"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class FieldSpec:
    """A writable attribute of a resource record."""

    name: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    unique: bool = False
    updatable: bool = True
    max_length: int | None = None


@dataclass(frozen=True)
class CommentCollection:
    """Dependent comment table owned by a resource family."""

    table: str
    parent_field: str


@dataclass(frozen=True)
class ResourceDescriptor:
    """Everything the gateway needs to serve one resource family."""

    name: str
    label: str
    table: str
    key_field: str
    key_kind: KeyKind
    fields: tuple[FieldSpec, ...]
    search_fields: tuple[str, ...]
    sort_columns: Mapping[str, str]
    default_sort: str
    default_order: SortOrder = SortOrder.ASC
    readonly_fields: tuple[str, ...] = ("created_at",)
    comments: CommentCollection | None = None
    privileged: bool = False
    _by_name: Mapping[str, FieldSpec] = field(init=False, repr=False, compare=False, default=None)

    def __post_init__(self) -> None:
        if self.default_sort not in self.sort_columns:
            raise ValueError(f"{self.name}: default sort '{self.default_sort}' is not allow-listed")
        # Freeze the sort map so it stays a constant lookup table
        object.__setattr__(self, "sort_columns", MappingProxyType(dict(self.sort_columns)))
        object.__setattr__(self, "_by_name", MappingProxyType({f.name: f for f in self.fields}))

    # ── Field views ──────────────────────────────────────────────────

    def get_field(self, name: str) -> FieldSpec | None:
        return self._by_name.get(name)

    @property
    def required_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.required)

    @property
    def unique_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.unique)

    @property
    def updatable_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(
            f for f in self.fields
            if f.updatable and f.kind is not FieldKind.SECRET and f.name != self.key_field
        )

    @property
    def secret_field(self) -> FieldSpec | None:
        for f in self.fields:
            if f.kind is FieldKind.SECRET:
                return f
        return None

    @property
    def visible_columns(self) -> tuple[str, ...]:
        """Columns returned to callers — secrets never appear here."""
        columns = [self.key_field]
        columns.extend(
            f.name for f in self.fields
            if f.kind is not FieldKind.SECRET and f.name != self.key_field
        )
        columns.extend(self.readonly_fields)
        return tuple(columns)

    @property
    def list_fields(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.kind is FieldKind.LIST)

    @property
    def has_comments(self) -> bool:
        return self.comments is not None

    @property
    def has_credential(self) -> bool:
        return self.secret_field is not None

    # ── Keys ─────────────────────────────────────────────────────────

    def coerce_key(self, raw: object) -> int | str:
        """Convert a caller-supplied identifier into this family's key type.

        Raises ``ValidationError`` for an empty or malformed key.
        """
        if raw is None or isinstance(raw, bool):
            raise ValidationError(f"{self.key_field} is required")
        text = str(raw).strip()
        if not text:
            raise ValidationError(f"{self.key_field} is required")

        if self.key_kind is KeyKind.SURROGATE:
            row_id = parse_row_id(text)
            if row_id is None:
                raise ValidationError(f"Invalid {self.label.lower()} {self.key_field}")
            return row_id

        spec = self.get_field(self.key_field)
        if spec and spec.max_length and len(text) > spec.max_length:
            raise ValidationError(f"Invalid {self.label.lower()} {self.key_field}")
        return text
