"""Unit tests for the RecordService."""

import pytest

from course_api.application.services import RecordService
from course_api.domain.catalog import ASSIGNMENTS, STUDENTS, WEEKS
from course_api.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)

STUDENT = {
    "student_id": "s1",
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "password": "correct horse",
}


@pytest.fixture
def students(repositories, hasher) -> RecordService:
    return RecordService(STUDENTS, repositories.records(STUDENTS), hasher)


@pytest.fixture
def weeks(repositories, hasher) -> RecordService:
    return RecordService(WEEKS, repositories.records(WEEKS), hasher)


@pytest.mark.asyncio
async def test_create_student_hashes_password_and_hides_it(students, repositories):
    record = await students.create_record(STUDENT)

    assert record.key == "s1"
    assert "password" not in record.to_dict()
    stored = repositories.records(STUDENTS).rows["s1"]
    assert stored["password"] == "hashed:correct horse"


@pytest.mark.asyncio
async def test_create_reports_every_missing_field(students):
    with pytest.raises(ValidationError) as exc_info:
        await students.create_record({"name": "Ada", "email": " "})
    assert exc_info.value.missing == ["student_id", "email", "password"]


@pytest.mark.asyncio
async def test_create_rejects_markup_only_required_field(weeks):
    with pytest.raises(ValidationError) as exc_info:
        await weeks.create_record(
            {"week_id": "w1", "title": "<b></b>", "start_date": "2024-01-01", "description": "d"}
        )
    assert exc_info.value.missing == ["title"]


@pytest.mark.asyncio
async def test_create_duplicate_email_conflicts(students):
    await students.create_record(STUDENT)
    with pytest.raises(DuplicateEntityError) as exc_info:
        await students.create_record({**STUDENT, "student_id": "s2"})
    assert exc_info.value.field == "email"


@pytest.mark.asyncio
async def test_create_rejects_short_password(students, repositories):
    with pytest.raises(ValidationError, match="at least 8"):
        await students.create_record({**STUDENT, "password": "short"})
    assert repositories.records(STUDENTS).rows == {}


@pytest.mark.asyncio
async def test_get_missing_record_is_not_found(weeks):
    with pytest.raises(EntityNotFoundError):
        await weeks.get_record("nope")


@pytest.mark.asyncio
async def test_get_with_malformed_surrogate_key(repositories):
    service = RecordService(ASSIGNMENTS, repositories.records(ASSIGNMENTS))
    with pytest.raises(ValidationError):
        await service.get_record("abc")


@pytest.mark.asyncio
async def test_update_is_partial(weeks):
    await weeks.create_record(
        {"week_id": "w1", "title": "Intro", "start_date": "2024-01-01", "description": "First"}
    )
    record = await weeks.update_record({"week_id": "w1", "title": "Intro (revised)"})

    assert record.values["title"] == "Intro (revised)"
    assert record.values["description"] == "First"


@pytest.mark.asyncio
async def test_update_uses_fallback_key(weeks):
    await weeks.create_record(
        {"week_id": "w1", "title": "Intro", "start_date": "2024-01-01", "description": "First"}
    )
    record = await weeks.update_record({"title": "Renamed"}, fallback_key="w1")
    assert record.values["title"] == "Renamed"


@pytest.mark.asyncio
async def test_update_without_fields(weeks):
    await weeks.create_record(
        {"week_id": "w1", "title": "Intro", "start_date": "2024-01-01", "description": "First"}
    )
    with pytest.raises(ValidationError, match="No fields to update"):
        await weeks.update_record({"week_id": "w1", "title": "  "})


@pytest.mark.asyncio
async def test_update_missing_record(weeks):
    with pytest.raises(EntityNotFoundError):
        await weeks.update_record({"week_id": "ghost", "title": "x"})


@pytest.mark.asyncio
async def test_update_cannot_touch_password(students, repositories):
    await students.create_record(STUDENT)
    with pytest.raises(ValidationError, match="No fields to update"):
        await students.update_record({"student_id": "s1", "password": "new secret!"})
    assert repositories.records(STUDENTS).rows["s1"]["password"] == "hashed:correct horse"


@pytest.mark.asyncio
async def test_update_email_to_taken_value_conflicts(students):
    await students.create_record(STUDENT)
    await students.create_record({**STUDENT, "student_id": "s2", "email": "grace@example.com"})
    with pytest.raises(DuplicateEntityError):
        await students.update_record({"student_id": "s2", "email": "ada@example.com"})


@pytest.mark.asyncio
async def test_update_email_to_own_value_is_allowed(students):
    await students.create_record(STUDENT)
    record = await students.update_record({"student_id": "s1", "email": "ada@example.com"})
    assert record.values["email"] == "ada@example.com"


@pytest.mark.asyncio
async def test_delete(weeks):
    await weeks.create_record(
        {"week_id": "w1", "title": "Intro", "start_date": "2024-01-01", "description": "First"}
    )
    await weeks.delete_record("w1")
    with pytest.raises(EntityNotFoundError):
        await weeks.delete_record("w1")


@pytest.mark.asyncio
async def test_list_sorted_descending(repositories):
    service = RecordService(ASSIGNMENTS, repositories.records(ASSIGNMENTS))
    for title in ("B", "A", "C"):
        await service.create_record(
            {"title": title, "description": "d", "due_date": "2024-05-01"}
        )
    records = await service.list_records({"sort": "title", "order": "desc"})
    assert [r.values["title"] for r in records] == ["C", "B", "A"]
