from orchestra.db.repositories.tag_repository import TagRepository
from orchestra.db.repositories.task_comment_repository import TaskCommentRepository
from orchestra.db.repositories.task_repository import TaskRepository
from orchestra.db.repositories.task_tag_relation_repository import TaskTagRelationRepository
from orchestra.domain.queries import (
    DeadlineFilter,
    PageRequest,
    QueryBounds,
    TaskQuery,
    resolve_bounds,
)

__all__ = [
    "DeadlineFilter",
    "PageRequest",
    "QueryBounds",
    "TagRepository",
    "TaskCommentRepository",
    "TaskQuery",
    "TaskRepository",
    "TaskTagRelationRepository",
    "resolve_bounds",
]
