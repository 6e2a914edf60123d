"""SQLAlchemy ORM models for discussion comments.

Parent references are plain indexed columns, not enforced foreign keys —
the gateway deletes comments together with their parent.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from course_api.infrastructure.database.base import Base


class _CommentColumns:
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author: Mapped[str] = mapped_column(String(100), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class AssignmentCommentModel(_CommentColumns, Base):
    __tablename__ = "assignment_comments"

    assignment_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class ResourceCommentModel(_CommentColumns, Base):
    __tablename__ = "resource_comments"

    resource_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class WeekCommentModel(_CommentColumns, Base):
    __tablename__ = "week_comments"

    week_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
