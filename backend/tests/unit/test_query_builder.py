"""Unit tests for statement construction — caller text must never reach the SQL string."""

from sqlalchemy.dialects import sqlite

from course_api.domain.catalog import RESOURCES, STUDENTS
from course_api.domain.entities import ListQuery, SortOrder
from course_api.infrastructure.database.models import ResourceModel, StudentModel
from course_api.infrastructure.database.query_builder import QueryBuilder


def _compile(stmt):
    return stmt.compile(dialect=sqlite.dialect())


def test_search_term_is_bound_not_inlined():
    builder = QueryBuilder(RESOURCES, ResourceModel.__table__)
    term = "x' OR 1=1 --"
    compiled = _compile(builder.select_list(ListQuery("title", SortOrder.ASC, term)))

    assert term not in str(compiled)
    assert term in compiled.params.values()


def test_list_order_has_tie_breaker_in_same_direction():
    builder = QueryBuilder(RESOURCES, ResourceModel.__table__)
    sql = str(_compile(builder.select_list(ListQuery("created_at", SortOrder.DESC))))

    assert "ORDER BY resources.created_at DESC, resources.id DESC" in sql
    assert "WHERE" not in sql


def test_secret_column_is_never_selected_for_reads():
    builder = QueryBuilder(STUDENTS, StudentModel.__table__)
    sql = str(_compile(builder.select_list(ListQuery("name", SortOrder.ASC))))

    assert "students.password" not in sql
    assert "students.email" in sql


def test_conflict_lookup_excludes_own_key():
    builder = QueryBuilder(STUDENTS, StudentModel.__table__)
    compiled = _compile(builder.select_conflict("email", "ada@example.com", exclude_key="s1"))

    assert "students.student_id !=" in str(compiled)
    assert set(compiled.params.values()) >= {"ada@example.com", "s1"}
