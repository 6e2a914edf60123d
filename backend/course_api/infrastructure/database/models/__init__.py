from .student import StudentModel
from .course_content import AssignmentModel, ResourceModel, WeekModel
from .comments import AssignmentCommentModel, ResourceCommentModel, WeekCommentModel

# Table name → ORM model, used by the generic repositories
MODEL_REGISTRY = {
    model.__tablename__: model
    for model in (
        StudentModel,
        AssignmentModel,
        ResourceModel,
        WeekModel,
        AssignmentCommentModel,
        ResourceCommentModel,
        WeekCommentModel,
    )
}

__all__ = [
    "StudentModel",
    "AssignmentModel",
    "ResourceModel",
    "WeekModel",
    "AssignmentCommentModel",
    "ResourceCommentModel",
    "WeekCommentModel",
    "MODEL_REGISTRY",
]
