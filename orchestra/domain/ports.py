"""
Repository ports consumed by the task service.

The service depends on these Protocols, not on the SQL implementations, so
any asynchronous store that honours the contracts can back it. None of the
ports apply business rules; ``save`` is an upsert keyed by id presence.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import Protocol

from orchestra.domain.entities import Tag, Task, TaskComment, TaskTagRelation
from orchestra.domain.queries import QueryBounds, TaskQuery


class TaskRepositoryPort(Protocol):
    async def find_by_id_and_user(self, task_id: int, user_id: int) -> Task | None: ...

    async def find(self, query: TaskQuery, bounds: QueryBounds) -> Sequence[Task]: ...

    async def count(self, query: TaskQuery) -> int: ...

    async def save(self, task: Task) -> Task: ...

    async def delete(self, task: Task) -> None: ...


class TagRepositoryPort(Protocol):
    async def find_by_id_and_user(self, tag_id: int, user_id: int) -> Tag | None: ...

    async def find_by_ids(self, tag_ids: Collection[int]) -> Sequence[Tag]: ...

    async def save(self, tag: Tag) -> Tag: ...


class TaskTagRelationRepositoryPort(Protocol):
    async def find_by_task_id(self, task_id: int) -> Sequence[TaskTagRelation]: ...

    async def find_by_task_and_tag(self, task_id: int, tag_id: int) -> TaskTagRelation | None: ...

    async def create(self, task_id: int, tag_id: int) -> TaskTagRelation: ...

    async def delete_by_task_and_tag(self, task_id: int, tag_id: int) -> None: ...


class TaskCommentRepositoryPort(Protocol):
    async def find_by_task_id(
        self,
        task_id: int,
        bounds: QueryBounds,
    ) -> Sequence[TaskComment]: ...

    async def find_by_id_and_user(self, comment_id: int, user_id: int) -> TaskComment | None: ...

    async def save(self, comment: TaskComment) -> TaskComment: ...

    async def delete(self, comment: TaskComment) -> None: ...
