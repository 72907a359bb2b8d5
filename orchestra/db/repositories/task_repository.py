from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from orchestra.db.models import TaskCommentRecord, TaskRecord, TaskTagRelationRecord, to_db_datetime
from orchestra.domain.entities import Task
from orchestra.domain.queries import DeadlineFilter, QueryBounds, TaskQuery


def deadline_clause(deadline: DeadlineFilter) -> ColumnElement[bool]:
    deadline_column = col(TaskRecord.deadline)
    if deadline.requires_no_deadline:
        return deadline_column.is_(None)
    if deadline.deadline_from is None:
        return deadline_column <= to_db_datetime(deadline.deadline_to)
    if deadline.deadline_to is None:
        return deadline_column >= to_db_datetime(deadline.deadline_from)
    return deadline_column.between(
        to_db_datetime(deadline.deadline_from),
        to_db_datetime(deadline.deadline_to),
    )


def _apply_query(statement: Any, query: TaskQuery) -> Any:
    statement = statement.where(TaskRecord.user_id == query.user_id)
    if query.status is not None:
        statement = statement.where(TaskRecord.status == query.status.value)
    if query.exclude_status is not None:
        statement = statement.where(TaskRecord.status != query.exclude_status.value)
    if query.deadline is not None:
        statement = statement.where(deadline_clause(query.deadline))
    return statement


class TaskRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id_and_user(self, task_id: int, user_id: int) -> Task | None:
        record = await self._get_record(task_id, user_id)
        return record.to_entity() if record is not None else None

    async def find(self, query: TaskQuery, bounds: QueryBounds) -> Sequence[Task]:
        statement = _apply_query(select(TaskRecord), query).order_by(
            col(TaskRecord.created_at).asc(),
            col(TaskRecord.id).asc(),
        )
        if bounds.offset:
            statement = statement.offset(bounds.offset)
        if bounds.limit is not None:
            statement = statement.limit(bounds.limit)
        result = await self.session.exec(statement)
        return [record.to_entity() for record in result.all()]

    async def count(self, query: TaskQuery) -> int:
        statement = _apply_query(select(func.count()).select_from(TaskRecord), query)
        result = await self.session.exec(statement)
        return int(result.one())

    async def save(self, task: Task) -> Task:
        record = await self.session.get(TaskRecord, task.id) if task.id is not None else None
        if record is None:
            record = TaskRecord(id=task.id, user_id=task.user_id, title=task.title)
        record.user_id = task.user_id
        record.task_list_id = task.task_list_id
        record.title = task.title
        record.description = task.description
        if task.status is not None:
            record.status = task.status
        record.deadline = to_db_datetime(task.deadline)
        if task.created_at is not None:
            record.created_at = to_db_datetime(task.created_at)
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record.to_entity()

    async def delete(self, task: Task) -> None:
        if task.id is None:
            return
        await self.session.exec(
            delete(TaskTagRelationRecord).where(col(TaskTagRelationRecord.task_id) == task.id)
        )
        await self.session.exec(
            delete(TaskCommentRecord).where(col(TaskCommentRecord.task_id) == task.id)
        )
        await self.session.exec(delete(TaskRecord).where(col(TaskRecord.id) == task.id))
        await self.session.commit()

    async def _get_record(self, task_id: int, user_id: int) -> TaskRecord | None:
        statement = select(TaskRecord).where(
            TaskRecord.id == task_id,
            TaskRecord.user_id == user_id,
        )
        result = await self.session.exec(statement)
        return result.first()
