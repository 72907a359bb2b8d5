from __future__ import annotations

import asyncio
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pytest import MonkeyPatch
from sqlmodel import Session, SQLModel, create_engine

from orchestra.core.config import get_settings
from orchestra.db.engine import dispose_engine
from orchestra.db.models import TagRecord
from orchestra.main import create_app
from tests.shared import ApiTestContext, to_async_sqlite_url, to_sqlite_url


@pytest.fixture
def api_context(tmp_path: Path, monkeypatch: MonkeyPatch) -> Iterator[ApiTestContext]:
    """
    Creates a temporary SQLite database and a test client.
    Seeds tags for two users to check owner scoping.
    """
    db_path = tmp_path / "api-integration.db"
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("DATABASE_URL", to_async_sqlite_url(db_path))
    monkeypatch.delenv("DB_AUTO_INIT", raising=False)
    get_settings.cache_clear()
    asyncio.run(dispose_engine())

    engine = create_engine(to_sqlite_url(db_path))
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        home = TagRecord(user_id=1, name="home")
        work = TagRecord(user_id=1, name="work")
        foreign = TagRecord(user_id=2, name="private")
        session.add(home)
        session.add(work)
        session.add(foreign)
        session.commit()
        session.refresh(home)
        session.refresh(work)
        session.refresh(foreign)
        assert home.id is not None
        assert work.id is not None
        assert foreign.id is not None
        tag_ids = (home.id, work.id, foreign.id)

    with TestClient(create_app()) as client:
        yield ApiTestContext(
            client=client,
            engine=engine,
            user_id=1,
            other_user_id=2,
            tag_id=tag_ids[0],
            second_tag_id=tag_ids[1],
            other_user_tag_id=tag_ids[2],
        )

    engine.dispose()
    asyncio.run(dispose_engine())
    get_settings.cache_clear()
