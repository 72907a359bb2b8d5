from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from orchestra.db import models  # noqa: F401
from orchestra.db.engine import create_engine_from_url
from orchestra.db.repositories import TagRepository
from orchestra.domain.entities import Tag
from orchestra.domain.identity import CurrentUser
from orchestra.services import TaskService, build_task_service

OWNER = CurrentUser(id=1, email="owner@example.com")
STRANGER = CurrentUser(id=2, email="stranger@example.com")


def to_sqlite_url(path: Path) -> str:
    return f"sqlite:///{path.as_posix()}"


def to_async_sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path.as_posix()}"


@dataclass
class ApiTestContext:
    client: TestClient
    engine: Engine
    user_id: int
    other_user_id: int
    tag_id: int
    second_tag_id: int
    other_user_tag_id: int

    def headers(self, user_id: int | None = None) -> dict[str, str]:
        resolved = self.user_id if user_id is None else user_id
        return {"X-User-Id": str(resolved), "X-User-Email": f"user-{resolved}@example.com"}


@dataclass
class ServiceTestContext:
    session: AsyncSession
    service: TaskService
    tags: TagRepository

    async def create_tag(self, user: CurrentUser, name: str) -> Tag:
        return await self.tags.save(Tag(user_id=user.id, name=name))


@asynccontextmanager
async def service_scope(db_path: Path) -> AsyncIterator[ServiceTestContext]:
    engine = create_engine_from_url(to_async_sqlite_url(db_path))
    try:
        async with engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.create_all)
        async with AsyncSession(engine, expire_on_commit=False) as session:
            yield ServiceTestContext(
                session=session,
                service=build_task_service(session),
                tags=TagRepository(session),
            )
    finally:
        await engine.dispose()
