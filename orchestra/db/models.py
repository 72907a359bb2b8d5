from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, String, Text
from sqlmodel import Field, SQLModel

from orchestra.domain.entities import (
    TAG_NAME_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Tag,
    Task,
    TaskComment,
    TaskTagRelation,
    as_utc,
    utc_now,
)
from orchestra.domain.status import TaskStatus


def _timestamp_column(*, nullable: bool) -> Column:
    return Column(DateTime(timezone=True), nullable=nullable)


def to_db_datetime(value: datetime | None) -> datetime | None:
    """Aware UTC value as bound to timestamp columns and deadline comparisons."""
    return as_utc(value)


class TaskRecord(SQLModel, table=True):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_user_status_created", "user_id", "status", "created_at"),
        Index("ix_tasks_user_status_deadline", "user_id", "status", "deadline"),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    task_list_id: int | None = Field(default=None, nullable=True, index=True)
    title: str = Field(sa_column=Column(String(length=TITLE_MAX_LENGTH), nullable=False))
    description: str | None = Field(default=None, sa_column=Column(Text(), nullable=True))
    status: TaskStatus = Field(
        default=TaskStatus.UNPROCESSED,
        sa_column=Column(String(length=32), nullable=False, index=True),
    )
    deadline: datetime | None = Field(default=None, sa_column=_timestamp_column(nullable=True))
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=_timestamp_column(nullable=False),
    )

    def to_entity(self) -> Task:
        return Task(
            id=self.id,
            user_id=self.user_id,
            task_list_id=self.task_list_id,
            title=self.title,
            description=self.description,
            status=TaskStatus(self.status),
            deadline=as_utc(self.deadline),
            created_at=as_utc(self.created_at),
        )


class TagRecord(SQLModel, table=True):
    __tablename__ = "tags"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    name: str = Field(sa_column=Column(String(length=TAG_NAME_MAX_LENGTH), nullable=False))

    def to_entity(self) -> Tag:
        return Tag(id=self.id, user_id=self.user_id, name=self.name)


class TaskTagRelationRecord(SQLModel, table=True):
    __tablename__ = "tasks_tags"

    task_id: int = Field(foreign_key="tasks.id", primary_key=True)
    tag_id: int = Field(foreign_key="tags.id", primary_key=True, index=True)

    def to_entity(self) -> TaskTagRelation:
        return TaskTagRelation(task_id=self.task_id, tag_id=self.tag_id)


class TaskCommentRecord(SQLModel, table=True):
    __tablename__ = "task_comments"
    __table_args__ = (Index("ix_task_comments_task_created", "task_id", "created_at"),)

    id: int | None = Field(default=None, primary_key=True)
    task_id: int = Field(foreign_key="tasks.id", nullable=False, index=True)
    user_id: int = Field(nullable=False, index=True)
    comment_text: str = Field(sa_column=Column(Text(), nullable=False))
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=_timestamp_column(nullable=False),
    )
    updated_at: datetime | None = Field(default=None, sa_column=_timestamp_column(nullable=True))

    def to_entity(self) -> TaskComment:
        return TaskComment(
            id=self.id,
            task_id=self.task_id,
            user_id=self.user_id,
            comment_text=self.comment_text,
            created_at=as_utc(self.created_at),
            updated_at=as_utc(self.updated_at),
        )
