"""The resource families served by the gateway."""

from course_api.domain.entities import (
    CommentCollection,
    FieldKind,
    FieldSpec,
    KeyKind,
    ResourceDescriptor,
    SortOrder,
)

STUDENTS = ResourceDescriptor(
    name="students",
    label="Student",
    table="students",
    key_field="student_id",
    key_kind=KeyKind.NATURAL,
    fields=(
        FieldSpec("student_id", required=True, unique=True, updatable=False, max_length=50),
        FieldSpec("name", required=True, max_length=100),
        FieldSpec("email", FieldKind.EMAIL, required=True, unique=True, max_length=100),
        FieldSpec("password", FieldKind.SECRET, required=True, updatable=False),
    ),
    search_fields=("name", "student_id", "email"),
    sort_columns={"name": "name", "student_id": "student_id", "email": "email"},
    default_sort="student_id",
    privileged=True,
)

ASSIGNMENTS = ResourceDescriptor(
    name="assignments",
    label="Assignment",
    table="assignments",
    key_field="id",
    key_kind=KeyKind.SURROGATE,
    fields=(
        FieldSpec("title", required=True, max_length=200),
        FieldSpec("description", required=True),
        FieldSpec("due_date", FieldKind.DATE, required=True),
        FieldSpec("files", FieldKind.LIST),
    ),
    search_fields=("title", "description"),
    sort_columns={"title": "title", "due_date": "due_date", "created_at": "created_at"},
    default_sort="created_at",
    readonly_fields=("created_at", "updated_at"),
    comments=CommentCollection(table="assignment_comments", parent_field="assignment_id"),
)

RESOURCES = ResourceDescriptor(
    name="resources",
    label="Resource",
    table="resources",
    key_field="id",
    key_kind=KeyKind.SURROGATE,
    fields=(
        FieldSpec("title", required=True, max_length=200),
        FieldSpec("description"),
        FieldSpec("link", FieldKind.URL, required=True, max_length=500),
    ),
    search_fields=("title", "description"),
    sort_columns={"title": "title", "created_at": "created_at"},
    default_sort="created_at",
    default_order=SortOrder.DESC,
    comments=CommentCollection(table="resource_comments", parent_field="resource_id"),
)

WEEKS = ResourceDescriptor(
    name="weeks",
    label="Week",
    table="weeks",
    key_field="week_id",
    key_kind=KeyKind.NATURAL,
    fields=(
        FieldSpec("week_id", required=True, unique=True, updatable=False, max_length=50),
        FieldSpec("title", required=True, max_length=200),
        FieldSpec("start_date", FieldKind.DATE, required=True),
        FieldSpec("description", required=True),
        FieldSpec("links", FieldKind.LIST),
    ),
    search_fields=("title", "description"),
    sort_columns={"title": "title", "start_date": "start_date", "created_at": "created_at"},
    default_sort="start_date",
    readonly_fields=("created_at", "updated_at"),
    comments=CommentCollection(table="week_comments", parent_field="week_id"),
)

RESOURCE_CATALOG: dict[str, ResourceDescriptor] = {
    d.name: d for d in (STUDENTS, ASSIGNMENTS, RESOURCES, WEEKS)
}
