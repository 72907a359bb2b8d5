from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from fastapi import APIRouter, Request, Response, status

from orchestra.api.dependencies import AuthenticatedUser, PageRequestDep, TaskServiceDep
from orchestra.api.errors import ApiException, ValidationIssue, error_response_docs
from orchestra.api.schemas import (
    TagRead,
    TaskCommentRead,
    TaskCommentWrite,
    TaskCreate,
    TaskRead,
    TaskUpdate,
)
from orchestra.core.logging import bind_log_context
from orchestra.domain.entities import Task, TaskComment

router = APIRouter(prefix="/tasks", tags=["tasks"])

DEADLINE_FROM_PARAM = "deadlineFrom"
DEADLINE_TO_PARAM = "deadlineTo"

_NOT_FOUND_DOCS = error_response_docs(status.HTTP_404_NOT_FOUND)
_WRITE_DOCS = error_response_docs(status.HTTP_400_BAD_REQUEST, status.HTTP_404_NOT_FOUND)


def _parse_deadline_param(request: Request, name: str) -> datetime | None:
    raw_value = (request.query_params.get(name) or "").strip()
    if not raw_value:
        return None
    try:
        return datetime.fromisoformat(raw_value)
    except ValueError as exc:
        raise ApiException(
            status.HTTP_400_BAD_REQUEST,
            "VALIDATION_ERROR",
            "Request validation failed.",
            issues=[ValidationIssue(field=f"query.{name}", message="Invalid date-time value")],
        ) from exc


def _has_deadline_params(request: Request) -> bool:
    params = request.query_params
    return DEADLINE_FROM_PARAM in params or DEADLINE_TO_PARAM in params


def _to_read(tasks: Iterable[Task]) -> list[TaskRead]:
    return [TaskRead.model_validate(task) for task in tasks]


@router.get("/unprocessed", response_model=list[TaskRead])
async def list_unprocessed_tasks(
    user: AuthenticatedUser,
    service: TaskServiceDep,
    page: PageRequestDep,
) -> list[TaskRead]:
    return _to_read(await service.list_unprocessed(user, page))


@router.get("/unprocessed/count", response_model=int)
async def count_unprocessed_tasks(user: AuthenticatedUser, service: TaskServiceDep) -> int:
    return await service.count_unprocessed(user)


@router.get("/processed", response_model=list[TaskRead])
async def list_processed_tasks(
    request: Request,
    user: AuthenticatedUser,
    service: TaskServiceDep,
    page: PageRequestDep,
) -> list[TaskRead]:
    """
    Processed tasks of the caller.

    When neither ``deadlineFrom`` nor ``deadlineTo`` is present every processed
    task is returned. Once either parameter is present (an empty value counts as
    absent bound) the deadline filter applies, and with both bounds empty only
    tasks without a deadline match.
    """
    if not _has_deadline_params(request):
        return _to_read(await service.list_processed(user, page))
    tasks = await service.list_processed_by_deadline(
        user,
        _parse_deadline_param(request, DEADLINE_FROM_PARAM),
        _parse_deadline_param(request, DEADLINE_TO_PARAM),
        page,
    )
    return _to_read(tasks)


@router.get("/processed/count", response_model=int)
async def count_processed_tasks(
    request: Request,
    user: AuthenticatedUser,
    service: TaskServiceDep,
) -> int:
    if not _has_deadline_params(request):
        return await service.count_processed(user)
    return await service.count_processed_by_deadline(
        user,
        _parse_deadline_param(request, DEADLINE_FROM_PARAM),
        _parse_deadline_param(request, DEADLINE_TO_PARAM),
    )


@router.get("/uncompleted", response_model=list[TaskRead])
async def list_uncompleted_tasks(
    user: AuthenticatedUser,
    service: TaskServiceDep,
    page: PageRequestDep,
) -> list[TaskRead]:
    return _to_read(await service.list_uncompleted(user, page))


@router.get("/uncompleted/count", response_model=int)
async def count_uncompleted_tasks(user: AuthenticatedUser, service: TaskServiceDep) -> int:
    return await service.count_uncompleted(user)


@router.put(
    "/completed/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND_DOCS,
)
async def complete_task(task_id: int, user: AuthenticatedUser, service: TaskServiceDep) -> None:
    bind_log_context(task_id=task_id)
    await service.complete_task(task_id, user)


@router.get("/{task_id}", response_model=TaskRead, responses=_NOT_FOUND_DOCS)
async def get_task(task_id: int, user: AuthenticatedUser, service: TaskServiceDep) -> TaskRead:
    return TaskRead.model_validate(await service.get_task(task_id, user))


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    responses=error_response_docs(status.HTTP_400_BAD_REQUEST),
)
async def create_task(
    payload: TaskCreate,
    request: Request,
    response: Response,
    user: AuthenticatedUser,
    service: TaskServiceDep,
) -> TaskRead:
    created = await service.create_task(
        Task(
            user_id=user.id,
            title=payload.title or "",
            description=payload.description,
            status=payload.status,
            deadline=payload.deadline,
        )
    )
    response.headers["Location"] = f"{request.url.path.rstrip('/')}/{created.id}"
    return TaskRead.model_validate(created)


@router.put("/{task_id}", response_model=TaskRead, responses=_WRITE_DOCS)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    user: AuthenticatedUser,
    service: TaskServiceDep,
) -> TaskRead:
    bind_log_context(task_id=task_id)
    updated = await service.update_task(
        Task(
            id=task_id,
            user_id=user.id,
            title=payload.title or "",
            description=payload.description,
            status=payload.status,
            deadline=payload.deadline,
        )
    )
    return TaskRead.model_validate(updated)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND_DOCS,
)
async def delete_task(task_id: int, user: AuthenticatedUser, service: TaskServiceDep) -> None:
    bind_log_context(task_id=task_id)
    await service.delete_task(task_id, user)


@router.get("/{task_id}/tags", response_model=list[TagRead], responses=_NOT_FOUND_DOCS)
async def get_task_tags(
    task_id: int,
    user: AuthenticatedUser,
    service: TaskServiceDep,
) -> list[TagRead]:
    return [TagRead.model_validate(tag) for tag in await service.get_tags(task_id, user)]


@router.put(
    "/{task_id}/tags/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND_DOCS,
)
async def assign_task_tag(
    task_id: int,
    tag_id: int,
    user: AuthenticatedUser,
    service: TaskServiceDep,
) -> None:
    bind_log_context(task_id=task_id)
    await service.assign_tag(task_id, tag_id, user)


@router.delete(
    "/{task_id}/tags/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND_DOCS,
)
async def remove_task_tag(
    task_id: int,
    tag_id: int,
    user: AuthenticatedUser,
    service: TaskServiceDep,
) -> None:
    bind_log_context(task_id=task_id)
    await service.remove_tag(task_id, tag_id, user)


@router.get(
    "/{task_id}/comments",
    response_model=list[TaskCommentRead],
    responses=_NOT_FOUND_DOCS,
)
async def get_task_comments(
    task_id: int,
    user: AuthenticatedUser,
    service: TaskServiceDep,
    page: PageRequestDep,
) -> list[TaskCommentRead]:
    comments = await service.get_comments(task_id, user, page)
    return [TaskCommentRead.model_validate(comment) for comment in comments]


@router.post(
    "/{task_id}/comments",
    response_model=TaskCommentRead,
    status_code=status.HTTP_201_CREATED,
    responses=_WRITE_DOCS,
)
async def add_task_comment(
    task_id: int,
    payload: TaskCommentWrite,
    user: AuthenticatedUser,
    service: TaskServiceDep,
) -> TaskCommentRead:
    bind_log_context(task_id=task_id)
    created = await service.add_comment(
        TaskComment(task_id=task_id, user_id=user.id, comment_text=payload.comment_text or "")
    )
    return TaskCommentRead.model_validate(created)
