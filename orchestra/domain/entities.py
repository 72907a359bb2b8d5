from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime

from orchestra.domain.status import TaskStatus

TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 10_000
COMMENT_TEXT_MAX_LENGTH = 10_000
TAG_NAME_MAX_LENGTH = 50


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class Task:
    user_id: int
    title: str
    id: int | None = None
    description: str | None = None
    status: TaskStatus | None = None
    deadline: datetime | None = None
    task_list_id: int | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Tag:
    user_id: int
    name: str
    id: int | None = None


@dataclass(frozen=True, slots=True)
class TaskTagRelation:
    task_id: int
    tag_id: int


@dataclass(frozen=True, slots=True)
class TaskComment:
    task_id: int
    user_id: int
    comment_text: str
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


def build_new_task(task: Task, *, status: TaskStatus, created_at: datetime) -> Task:
    """Fresh task from caller input; server-owned fields are never taken from it."""
    return Task(
        user_id=task.user_id,
        title=task.title,
        description=task.description,
        status=status,
        deadline=as_utc(task.deadline),
        created_at=as_utc(created_at),
    )


def build_updated_task(existing: Task, changes: Task, *, status: TaskStatus) -> Task:
    """Merge caller changes into ``existing`` keeping its identity, list and creation time."""
    return replace(
        existing,
        title=changes.title,
        description=changes.description,
        status=status,
        deadline=as_utc(changes.deadline),
    )


def build_new_comment(comment: TaskComment, *, created_at: datetime) -> TaskComment:
    return TaskComment(
        task_id=comment.task_id,
        user_id=comment.user_id,
        comment_text=comment.comment_text,
        created_at=as_utc(created_at),
        updated_at=None,
    )


def build_updated_comment(
    existing: TaskComment,
    comment_text: str,
    *,
    updated_at: datetime,
) -> TaskComment:
    return replace(existing, comment_text=comment_text, updated_at=as_utc(updated_at))
