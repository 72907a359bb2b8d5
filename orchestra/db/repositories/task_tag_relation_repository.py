from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from orchestra.db.models import TaskTagRelationRecord
from orchestra.domain.entities import TaskTagRelation


class TaskTagRelationRepository:
    """Join rows between tasks and tags; the (task_id, tag_id) pair is the primary key."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_task_id(self, task_id: int) -> Sequence[TaskTagRelation]:
        statement = (
            select(TaskTagRelationRecord)
            .where(TaskTagRelationRecord.task_id == task_id)
            .order_by(col(TaskTagRelationRecord.tag_id).asc())
        )
        result = await self.session.exec(statement)
        return [record.to_entity() for record in result.all()]

    async def find_by_task_and_tag(self, task_id: int, tag_id: int) -> TaskTagRelation | None:
        record = await self.session.get(TaskTagRelationRecord, (task_id, tag_id))
        return record.to_entity() if record is not None else None

    async def create(self, task_id: int, tag_id: int) -> TaskTagRelation:
        record = TaskTagRelationRecord(task_id=task_id, tag_id=tag_id)
        self.session.add(record)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise
        return TaskTagRelation(task_id=task_id, tag_id=tag_id)

    async def delete_by_task_and_tag(self, task_id: int, tag_id: int) -> None:
        await self.session.exec(
            delete(TaskTagRelationRecord).where(
                col(TaskTagRelationRecord.task_id) == task_id,
                col(TaskTagRelationRecord.tag_id) == tag_id,
            )
        )
        await self.session.commit()
