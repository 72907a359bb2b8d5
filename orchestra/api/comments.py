from __future__ import annotations

from fastapi import APIRouter, status

from orchestra.api.dependencies import AuthenticatedUser, TaskServiceDep
from orchestra.api.errors import error_response_docs
from orchestra.api.schemas import TaskCommentRead, TaskCommentWrite

router = APIRouter(prefix="/task-comments", tags=["comments"])


@router.put(
    "/{comment_id}",
    response_model=TaskCommentRead,
    responses=error_response_docs(status.HTTP_400_BAD_REQUEST, status.HTTP_404_NOT_FOUND),
)
async def update_comment(
    comment_id: int,
    payload: TaskCommentWrite,
    user: AuthenticatedUser,
    service: TaskServiceDep,
) -> TaskCommentRead:
    updated = await service.update_comment(comment_id, payload.comment_text or "", user)
    return TaskCommentRead.model_validate(updated)


@router.delete(
    "/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=error_response_docs(status.HTTP_404_NOT_FOUND),
)
async def delete_comment(comment_id: int, user: AuthenticatedUser, service: TaskServiceDep) -> None:
    await service.delete_comment(comment_id, user)
