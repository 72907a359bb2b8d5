from __future__ import annotations

from collections.abc import Collection, Sequence

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from orchestra.db.models import TagRecord
from orchestra.domain.entities import Tag


class TagRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id_and_user(self, tag_id: int, user_id: int) -> Tag | None:
        statement = select(TagRecord).where(TagRecord.id == tag_id, TagRecord.user_id == user_id)
        result = await self.session.exec(statement)
        record = result.first()
        return record.to_entity() if record is not None else None

    async def find_by_ids(self, tag_ids: Collection[int]) -> Sequence[Tag]:
        if not tag_ids:
            return []
        statement = (
            select(TagRecord)
            .where(col(TagRecord.id).in_(list(tag_ids)))
            .order_by(col(TagRecord.id).asc())
        )
        result = await self.session.exec(statement)
        return [record.to_entity() for record in result.all()]

    async def save(self, tag: Tag) -> Tag:
        record = await self.session.get(TagRecord, tag.id) if tag.id is not None else None
        if record is None:
            record = TagRecord(id=tag.id, user_id=tag.user_id, name=tag.name)
        record.user_id = tag.user_id
        record.name = tag.name
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record.to_entity()
