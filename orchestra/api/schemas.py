from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orchestra.domain.entities import (
    COMMENT_TEXT_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    as_utc,
    utc_now,
)
from orchestra.domain.status import TaskStatus

BLANK_MESSAGE = "Value must not be blank"
PAST_MESSAGE = "Value must not be in past"


def _too_long_message(max_length: int) -> str:
    return f"Value length must not be greater than {max_length}"


def _require_text(value: str | None, *, max_length: int) -> str:
    if value is None or not value.strip():
        raise ValueError(BLANK_MESSAGE)
    if len(value) > max_length:
        raise ValueError(_too_long_message(max_length))
    return value


def _limit_optional_text(value: str | None, *, max_length: int) -> str | None:
    if value is not None and len(value) > max_length:
        raise ValueError(_too_long_message(max_length))
    return value


class HealthzResponse(BaseModel):
    status: str
    service: str
    env: str


class ReadinessChecks(BaseModel):
    configuration: str
    database: str


class ReadyzResponse(BaseModel):
    status: str
    checks: ReadinessChecks


class TaskWrite(BaseModel):
    title: str | None = Field(default=None, validate_default=True)
    description: str | None = None
    status: TaskStatus | None = None
    deadline: datetime | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str | None) -> str:
        return _require_text(value, max_length=TITLE_MAX_LENGTH)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return _limit_optional_text(value, max_length=DESCRIPTION_MAX_LENGTH)


class TaskCreate(TaskWrite):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "Two litres, semi-skimmed.",
                "deadline": "2026-11-01T18:00:00Z",
            }
        }
    )

    @field_validator("deadline")
    @classmethod
    def validate_deadline(cls, value: datetime | None) -> datetime | None:
        normalized = as_utc(value)
        if normalized is not None and normalized < utc_now():
            raise ValueError(PAST_MESSAGE)
        return value


class TaskUpdate(TaskWrite):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "status": "PROCESSED",
                "deadline": "2026-11-02T18:00:00Z",
            }
        }
    )


class TaskRead(BaseModel):
    id: int
    user_id: int
    task_list_id: int | None
    title: str
    description: str | None
    status: TaskStatus
    deadline: datetime | None
    created_at: datetime
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 2,
                "user_id": 1,
                "task_list_id": None,
                "title": "Buy milk",
                "description": None,
                "status": "PROCESSED",
                "deadline": "2026-11-01T18:00:00Z",
                "created_at": "2026-10-19T09:00:00Z",
            }
        },
    )


class TagRead(BaseModel):
    id: int
    user_id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


class TaskCommentWrite(BaseModel):
    comment_text: str | None = Field(default=None, validate_default=True)
    model_config = ConfigDict(json_schema_extra={"example": {"comment_text": "ok"}})

    @field_validator("comment_text")
    @classmethod
    def validate_comment_text(cls, value: str | None) -> str:
        return _require_text(value, max_length=COMMENT_TEXT_MAX_LENGTH)


class TaskCommentRead(BaseModel):
    id: int
    task_id: int
    user_id: int
    comment_text: str
    created_at: datetime
    updated_at: datetime | None
    model_config = ConfigDict(from_attributes=True)
