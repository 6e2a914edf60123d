"""Domain entities — pure Python business objects returned by the gateway."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .descriptor import SortOrder


@dataclass
class ResourceRecord:
    """A row of any resource family, already decoded and safe to expose.

    ``values`` holds every visible column (key included); secrets are never
    loaded into it.
    """

    resource: str
    key: int | str
    values: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.values)


@dataclass
class Comment:
    """Discussion comment scoped to one parent resource record."""

    parent_field: str
    parent_key: int | str
    author: str
    text: str
    id: int | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            self.parent_field: self.parent_key,
            "author": self.author,
            "text": self.text,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class ListQuery:
    """Validated listing options — sort and order are always allow-listed tokens."""

    sort: str
    order: SortOrder
    search: str | None = None
