from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from orchestra.db.models import TaskCommentRecord, to_db_datetime
from orchestra.domain.entities import TaskComment
from orchestra.domain.queries import QueryBounds


class TaskCommentRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_task_id(self, task_id: int, bounds: QueryBounds) -> Sequence[TaskComment]:
        statement = (
            select(TaskCommentRecord)
            .where(TaskCommentRecord.task_id == task_id)
            .order_by(col(TaskCommentRecord.created_at).desc(), col(TaskCommentRecord.id).desc())
        )
        if bounds.offset:
            statement = statement.offset(bounds.offset)
        if bounds.limit is not None:
            statement = statement.limit(bounds.limit)
        result = await self.session.exec(statement)
        return [record.to_entity() for record in result.all()]

    async def find_by_id_and_user(self, comment_id: int, user_id: int) -> TaskComment | None:
        statement = select(TaskCommentRecord).where(
            TaskCommentRecord.id == comment_id,
            TaskCommentRecord.user_id == user_id,
        )
        result = await self.session.exec(statement)
        record = result.first()
        return record.to_entity() if record is not None else None

    async def save(self, comment: TaskComment) -> TaskComment:
        record = (
            await self.session.get(TaskCommentRecord, comment.id)
            if comment.id is not None
            else None
        )
        if record is None:
            record = TaskCommentRecord(
                id=comment.id,
                task_id=comment.task_id,
                user_id=comment.user_id,
                comment_text=comment.comment_text,
            )
        record.task_id = comment.task_id
        record.user_id = comment.user_id
        record.comment_text = comment.comment_text
        if comment.created_at is not None:
            record.created_at = to_db_datetime(comment.created_at)
        record.updated_at = to_db_datetime(comment.updated_at)
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record.to_entity()

    async def delete(self, comment: TaskComment) -> None:
        if comment.id is None:
            return
        await self.session.exec(
            delete(TaskCommentRecord).where(col(TaskCommentRecord.id) == comment.id)
        )
        await self.session.commit()
