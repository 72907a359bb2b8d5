from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError
from sqlmodel import create_engine

from orchestra.db.bootstrap import initialize_database
from orchestra.db.models import to_db_datetime
from orchestra.db.repositories import (
    DeadlineFilter,
    QueryBounds,
    TaskCommentRepository,
    TaskQuery,
    TaskRepository,
    TaskTagRelationRepository,
)
from orchestra.domain.entities import Tag, Task, TaskComment
from orchestra.domain.status import TaskStatus
from tests.shared import service_scope, to_async_sqlite_url, to_sqlite_url


def test_initialize_database_creates_schema(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "bootstrap.db"

    asyncio.run(initialize_database(database_url=to_async_sqlite_url(db_path)))

    engine = create_engine(to_sqlite_url(db_path))
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert {"tasks", "tags", "tasks_tags", "task_comments"} <= tables


def test_to_db_datetime_binds_aware_utc() -> None:
    plus_two = timezone(timedelta(hours=2))

    converted = to_db_datetime(datetime(2030, 1, 1, 12, 0, tzinfo=plus_two))

    assert to_db_datetime(None) is None
    assert converted == datetime(2030, 1, 1, 10, 0, tzinfo=UTC)
    assert converted is not None and converted.utcoffset() == timedelta(0)
    assert to_db_datetime(datetime(2030, 1, 1, 12, 0)) == datetime(2030, 1, 1, 12, 0, tzinfo=UTC)


def test_timestamps_round_trip_as_aware_utc(tmp_path: Path) -> None:
    async def run_scenario() -> None:
        async with service_scope(tmp_path / "repository.db") as ctx:
            repository = TaskRepository(ctx.session)
            local_deadline = datetime(2030, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=3)))
            saved = await repository.save(
                Task(
                    user_id=1,
                    title="Offset",
                    status=TaskStatus.PROCESSED,
                    deadline=local_deadline,
                )
            )
            comment = await TaskCommentRepository(ctx.session).save(
                TaskComment(
                    task_id=saved.id or 0,
                    user_id=1,
                    comment_text="noted",
                    updated_at=datetime(2030, 6, 2, tzinfo=UTC),
                )
            )

            assert saved.deadline == datetime(2030, 6, 1, 9, 0, tzinfo=UTC)
            assert saved.deadline is not None and saved.deadline.tzinfo == UTC
            assert saved.created_at is not None and saved.created_at.tzinfo == UTC
            assert comment.created_at is not None and comment.created_at.tzinfo == UTC
            assert comment.updated_at == datetime(2030, 6, 2, tzinfo=UTC)

            before = TaskQuery(
                user_id=1,
                status=TaskStatus.PROCESSED,
                deadline=DeadlineFilter(deadline_to=datetime(2030, 6, 1, 8, 59, tzinfo=UTC)),
            )
            at_offset = TaskQuery(
                user_id=1,
                status=TaskStatus.PROCESSED,
                deadline=DeadlineFilter(deadline_from=local_deadline, deadline_to=local_deadline),
            )
            assert await repository.count(before) == 0
            assert await repository.count(at_offset) == 1

    asyncio.run(run_scenario())


def test_task_repository_applies_query_and_bounds(tmp_path: Path) -> None:
    async def run_scenario() -> None:
        async with service_scope(tmp_path / "repository.db") as ctx:
            repository = TaskRepository(ctx.session)
            deadline = datetime(2030, 5, 1, 8, 0, tzinfo=UTC)
            saved = [
                await repository.save(
                    Task(user_id=1, title=f"Task {index}", status=TaskStatus.PROCESSED)
                )
                for index in range(3)
            ]
            dated = await repository.save(
                Task(user_id=1, title="Dated", status=TaskStatus.PROCESSED, deadline=deadline)
            )
            await repository.save(Task(user_id=1, title="Done", status=TaskStatus.COMPLETED))
            await repository.save(Task(user_id=2, title="Foreign", status=TaskStatus.PROCESSED))

            processed = TaskQuery(user_id=1, status=TaskStatus.PROCESSED)
            undated = TaskQuery(
                user_id=1,
                status=TaskStatus.PROCESSED,
                deadline=DeadlineFilter(),
            )
            open_tasks = TaskQuery(user_id=1, exclude_status=TaskStatus.COMPLETED)

            assert await repository.count(processed) == 4
            assert await repository.count(undated) == 3
            assert await repository.count(open_tasks) == 4
            window = await repository.find(processed, QueryBounds(offset=1, limit=2))
            assert [task.id for task in window] == [saved[1].id, saved[2].id]
            ranged = await repository.find(
                TaskQuery(
                    user_id=1,
                    status=TaskStatus.PROCESSED,
                    deadline=DeadlineFilter(deadline_from=deadline, deadline_to=deadline),
                ),
                QueryBounds(),
            )
            assert [task.id for task in ranged] == [dated.id]
            assert ranged[0].deadline == deadline

    asyncio.run(run_scenario())


def test_task_repository_save_updates_existing_row(tmp_path: Path) -> None:
    async def run_scenario() -> None:
        async with service_scope(tmp_path / "repository.db") as ctx:
            repository = TaskRepository(ctx.session)
            created = await repository.save(
                Task(
                    user_id=1,
                    title="Draft",
                    status=TaskStatus.UNPROCESSED,
                    created_at=datetime(2030, 1, 1, tzinfo=UTC),
                )
            )
            assert created.id is not None

            updated = await repository.save(
                Task(
                    id=created.id,
                    user_id=1,
                    title="Final",
                    status=TaskStatus.COMPLETED,
                    created_at=created.created_at,
                )
            )

            assert updated.id == created.id
            assert updated.title == "Final"
            assert updated.created_at == datetime(2030, 1, 1, tzinfo=UTC)
            assert await repository.find_by_id_and_user(created.id, 2) is None
            assert await repository.count(TaskQuery(user_id=1)) == 1

    asyncio.run(run_scenario())


def test_tag_repository_find_by_ids(tmp_path: Path) -> None:
    async def run_scenario() -> None:
        async with service_scope(tmp_path / "repository.db") as ctx:
            work = await ctx.tags.save(Tag(user_id=1, name="work"))
            home = await ctx.tags.save(Tag(user_id=1, name="home"))
            assert work.id is not None and home.id is not None

            assert await ctx.tags.find_by_ids([]) == []
            found = await ctx.tags.find_by_ids({home.id, work.id})
            assert [tag.name for tag in found] == ["work", "home"]
            assert await ctx.tags.find_by_id_and_user(work.id, 2) is None

    asyncio.run(run_scenario())


def test_relation_primary_key_rejects_duplicate_insert(tmp_path: Path) -> None:
    async def run_scenario() -> None:
        async with service_scope(tmp_path / "repository.db") as ctx:
            task = await TaskRepository(ctx.session).save(Task(user_id=1, title="Tagged"))
            tag = await ctx.tags.save(Tag(user_id=1, name="home"))
            assert task.id is not None and tag.id is not None
            repository = TaskTagRelationRepository(ctx.session)

            await repository.create(task.id, tag.id)
            ctx.session.expunge_all()
            with pytest.raises(IntegrityError):
                await repository.create(task.id, tag.id)

            relations = await repository.find_by_task_id(task.id)
            assert len(relations) == 1
            assert await repository.find_by_task_and_tag(task.id, tag.id) is not None

    asyncio.run(run_scenario())


def test_comment_repository_orders_newest_first(tmp_path: Path) -> None:
    async def run_scenario() -> None:
        async with service_scope(tmp_path / "repository.db") as ctx:
            task = await TaskRepository(ctx.session).save(Task(user_id=1, title="Discussed"))
            assert task.id is not None
            repository = TaskCommentRepository(ctx.session)
            moment = datetime(2030, 1, 1, tzinfo=UTC)
            older = await repository.save(
                TaskComment(task_id=task.id, user_id=1, comment_text="older", created_at=moment)
            )
            newer = await repository.save(
                TaskComment(
                    task_id=task.id,
                    user_id=1,
                    comment_text="newer",
                    created_at=moment + timedelta(minutes=5),
                )
            )
            tied = await repository.save(
                TaskComment(task_id=task.id, user_id=1, comment_text="tied", created_at=moment)
            )

            comments = await repository.find_by_task_id(task.id, QueryBounds())
            assert [comment.id for comment in comments] == [newer.id, tied.id, older.id]
            assert await repository.find_by_id_and_user(older.id or 0, 2) is None

    asyncio.run(run_scenario())
