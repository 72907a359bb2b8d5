from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime

from sqlmodel.ext.asyncio.session import AsyncSession

from orchestra.core.logging import get_logger
from orchestra.db.repositories import (
    TagRepository,
    TaskCommentRepository,
    TaskRepository,
    TaskTagRelationRepository,
)
from orchestra.domain.entities import (
    Tag,
    Task,
    TaskComment,
    as_utc,
    build_new_comment,
    build_new_task,
    build_updated_comment,
    build_updated_task,
    utc_now,
)
from orchestra.domain.errors import entity_not_found
from orchestra.domain.identity import CurrentUser
from orchestra.domain.ports import (
    TagRepositoryPort,
    TaskCommentRepositoryPort,
    TaskRepositoryPort,
    TaskTagRelationRepositoryPort,
)
from orchestra.domain.queries import (
    DeadlineFilter,
    PageRequest,
    TaskQuery,
    resolve_bounds,
)
from orchestra.domain.status import TaskStatus
from orchestra.orchestration.state_machine import resolve_creation_status, resolve_update_status

logger = get_logger("orchestra.services.tasks")


class TaskService:
    """
    Task lifecycle and query operations scoped to the owning user.

    Every lookup is filtered by the caller's id, so a task that belongs to
    somebody else is reported exactly like a missing one. The service keeps
    no state between calls.
    """

    def __init__(
        self,
        *,
        tasks: TaskRepositoryPort,
        tags: TagRepositoryPort,
        task_tags: TaskTagRelationRepositoryPort,
        comments: TaskCommentRepositoryPort,
    ) -> None:
        self._tasks = tasks
        self._tags = tags
        self._task_tags = task_tags
        self._comments = comments

    async def count_unprocessed(self, user: CurrentUser) -> int:
        return await self._tasks.count(TaskQuery(user_id=user.id, status=TaskStatus.UNPROCESSED))

    async def list_unprocessed(
        self,
        user: CurrentUser,
        page: PageRequest | None = None,
    ) -> Sequence[Task]:
        query = TaskQuery(user_id=user.id, status=TaskStatus.UNPROCESSED)
        return await self._tasks.find(query, resolve_bounds(page))

    async def count_processed(self, user: CurrentUser) -> int:
        return await self._tasks.count(TaskQuery(user_id=user.id, status=TaskStatus.PROCESSED))

    async def list_processed(
        self,
        user: CurrentUser,
        page: PageRequest | None = None,
    ) -> Sequence[Task]:
        query = TaskQuery(user_id=user.id, status=TaskStatus.PROCESSED)
        return await self._tasks.find(query, resolve_bounds(page))

    async def count_processed_by_deadline(
        self,
        user: CurrentUser,
        deadline_from: datetime | None,
        deadline_to: datetime | None,
    ) -> int:
        return await self._tasks.count(
            _processed_by_deadline_query(user, deadline_from, deadline_to)
        )

    async def list_processed_by_deadline(
        self,
        user: CurrentUser,
        deadline_from: datetime | None,
        deadline_to: datetime | None,
        page: PageRequest | None = None,
    ) -> Sequence[Task]:
        """
        Processed tasks filtered by deadline.

        Without bounds only tasks that have no deadline are returned; a single
        bound is open-ended and two bounds are inclusive.
        """
        query = _processed_by_deadline_query(user, deadline_from, deadline_to)
        return await self._tasks.find(query, resolve_bounds(page))

    async def count_uncompleted(self, user: CurrentUser) -> int:
        query = TaskQuery(user_id=user.id, exclude_status=TaskStatus.COMPLETED)
        return await self._tasks.count(query)

    async def list_uncompleted(
        self,
        user: CurrentUser,
        page: PageRequest | None = None,
    ) -> Sequence[Task]:
        query = TaskQuery(user_id=user.id, exclude_status=TaskStatus.COMPLETED)
        return await self._tasks.find(query, resolve_bounds(page))

    async def get_task(self, task_id: int, user: CurrentUser) -> Task:
        return await self._load_task(task_id, user.id)

    async def create_task(self, task: Task) -> Task:
        status = resolve_creation_status(task.status, task.deadline)
        created = await self._tasks.save(build_new_task(task, status=status, created_at=utc_now()))
        logger.info("task.created", task_id=created.id, user_id=created.user_id, status=status)
        return created

    async def update_task(self, task: Task) -> Task:
        existing = await self._load_task(task.id, task.user_id)
        status = resolve_update_status(
            existing.status or TaskStatus.UNPROCESSED,
            task.status,
            task.deadline,
        )
        updated = await self._tasks.save(build_updated_task(existing, task, status=status))
        logger.info("task.updated", task_id=updated.id, user_id=updated.user_id, status=status)
        return updated

    async def complete_task(self, task_id: int, user: CurrentUser) -> None:
        task = await self._load_task(task_id, user.id)
        await self._tasks.save(replace(task, status=TaskStatus.COMPLETED))
        logger.info("task.completed", task_id=task_id, user_id=user.id)

    async def delete_task(self, task_id: int, user: CurrentUser) -> None:
        task = await self._load_task(task_id, user.id)
        await self._tasks.delete(task)
        logger.info("task.deleted", task_id=task_id, user_id=user.id)

    async def get_tags(self, task_id: int, user: CurrentUser) -> Sequence[Tag]:
        await self._load_task(task_id, user.id)
        relations = await self._task_tags.find_by_task_id(task_id)
        if not relations:
            return []
        return await self._tags.find_by_ids({relation.tag_id for relation in relations})

    async def assign_tag(self, task_id: int, tag_id: int, user: CurrentUser) -> None:
        await self._load_task(task_id, user.id)
        tag = await self._tags.find_by_id_and_user(tag_id, user.id)
        if tag is None:
            raise entity_not_found("Tag", tag_id)

        # Read-then-write without a lock; the relation's primary key rejects a racing duplicate.
        existing = await self._task_tags.find_by_task_and_tag(task_id, tag_id)
        if existing is not None:
            return
        await self._task_tags.create(task_id, tag_id)
        logger.info("task.tag_assigned", task_id=task_id, tag_id=tag_id, user_id=user.id)

    async def remove_tag(self, task_id: int, tag_id: int, user: CurrentUser) -> None:
        await self._load_task(task_id, user.id)
        await self._task_tags.delete_by_task_and_tag(task_id, tag_id)
        logger.info("task.tag_removed", task_id=task_id, tag_id=tag_id, user_id=user.id)

    async def get_comments(
        self,
        task_id: int,
        user: CurrentUser,
        page: PageRequest | None = None,
    ) -> Sequence[TaskComment]:
        await self._load_task(task_id, user.id)
        return await self._comments.find_by_task_id(task_id, resolve_bounds(page))

    async def add_comment(self, comment: TaskComment) -> TaskComment:
        await self._load_task(comment.task_id, comment.user_id)
        created = await self._comments.save(build_new_comment(comment, created_at=utc_now()))
        logger.info(
            "task.comment_added",
            task_id=created.task_id,
            comment_id=created.id,
            user_id=created.user_id,
        )
        return created

    async def update_comment(
        self,
        comment_id: int,
        comment_text: str,
        user: CurrentUser,
    ) -> TaskComment:
        existing = await self._load_comment(comment_id, user.id)
        updated = await self._comments.save(
            build_updated_comment(existing, comment_text, updated_at=utc_now())
        )
        logger.info("task.comment_updated", comment_id=comment_id, user_id=user.id)
        return updated

    async def delete_comment(self, comment_id: int, user: CurrentUser) -> None:
        comment = await self._load_comment(comment_id, user.id)
        await self._comments.delete(comment)
        logger.info("task.comment_deleted", comment_id=comment_id, user_id=user.id)

    async def _load_task(self, task_id: int | None, user_id: int) -> Task:
        task = (
            await self._tasks.find_by_id_and_user(task_id, user_id)
            if task_id is not None
            else None
        )
        if task is None:
            raise entity_not_found("Task", task_id)
        return task

    async def _load_comment(self, comment_id: int | None, user_id: int) -> TaskComment:
        comment = (
            await self._comments.find_by_id_and_user(comment_id, user_id)
            if comment_id is not None
            else None
        )
        if comment is None:
            raise entity_not_found("Task comment", comment_id)
        return comment


def _processed_by_deadline_query(
    user: CurrentUser,
    deadline_from: datetime | None,
    deadline_to: datetime | None,
) -> TaskQuery:
    return TaskQuery(
        user_id=user.id,
        status=TaskStatus.PROCESSED,
        deadline=DeadlineFilter(
            deadline_from=as_utc(deadline_from),
            deadline_to=as_utc(deadline_to),
        ),
    )


def build_task_service(session: AsyncSession) -> TaskService:
    return TaskService(
        tasks=TaskRepository(session),
        tags=TagRepository(session),
        task_tags=TaskTagRelationRepository(session),
        comments=TaskCommentRepository(session),
    )
