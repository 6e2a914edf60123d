"""Statement construction for the generic record repository.

Identifiers (columns, sort keys, order direction) only ever come from the
resource descriptor and the constant maps below. Caller-supplied text is
always passed as a bound parameter.
"""

from typing import Any

from sqlalchemy import Table, and_, asc, delete, desc, exists, insert, or_, select, update
from sqlalchemy.sql import ColumnElement, Delete, Insert, Select, Update

from course_api.domain.entities import ListQuery, ResourceDescriptor, SortOrder

_ORDER_DIRECTIONS = {
    SortOrder.ASC: asc,
    SortOrder.DESC: desc,
}

# Every table keeps an integer row id used as the final ordering tie-breaker
ROW_ID_COLUMN = "id"


class QueryBuilder:
    """Builds SQLAlchemy Core statements for one resource family's table."""

    def __init__(self, descriptor: ResourceDescriptor, table: Table):
        self._descriptor = descriptor
        self._table = table
        self._visible = [table.c[name] for name in descriptor.visible_columns]
        self._key = table.c[descriptor.key_field]

    @property
    def key_column(self):
        return self._key

    def _key_matches(self, key: int | str) -> ColumnElement[bool]:
        return self._key == key

    def select_list(self, query: ListQuery) -> Select:
        direction = _ORDER_DIRECTIONS[query.order]
        sort_column = self._table.c[self._descriptor.sort_columns[query.sort]]

        stmt = select(*self._visible)
        if query.search:
            stmt = stmt.where(
                or_(
                    *(
                        self._table.c[name].icontains(query.search, autoescape=True)
                        for name in self._descriptor.search_fields
                    )
                )
            )
        return stmt.order_by(direction(sort_column), direction(self._table.c[ROW_ID_COLUMN]))

    def select_one(self, key: int | str) -> Select:
        return select(*self._visible).where(self._key_matches(key))

    def select_stored(self, key: int | str, columns: list[str]) -> Select:
        """Raw stored values of ``columns``, used to detect no-op updates."""
        return select(*(self._table.c[name] for name in columns)).where(self._key_matches(key))

    def select_exists(self, key: int | str) -> Select:
        return select(exists().where(self._key_matches(key)))

    def select_conflict(
        self,
        field: str,
        value: Any,
        exclude_key: int | str | None = None,
    ) -> Select:
        condition = self._table.c[field] == value
        if exclude_key is not None:
            condition = and_(condition, self._key != exclude_key)
        return select(self._key).where(condition).limit(1)

    def select_secret(self, key: int | str) -> Select:
        secret = self._descriptor.secret_field
        if secret is None:
            raise ValueError(f"{self._descriptor.name} has no credential column")
        return select(self._table.c[secret.name]).where(self._key_matches(key))

    def insert(self, values: dict[str, Any]) -> Insert:
        return insert(self._table).values(**values)

    def update(self, key: int | str, values: dict[str, Any]) -> Update:
        return update(self._table).where(self._key_matches(key)).values(**values)

    def delete(self, key: int | str) -> Delete:
        return delete(self._table).where(self._key_matches(key))


def delete_comments(table: Table, parent_field: str, parent_key: int | str) -> Delete:
    return delete(table).where(table.c[parent_field] == parent_key)
