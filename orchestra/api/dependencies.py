from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from orchestra.api.errors import ApiException
from orchestra.core.logging import bind_log_context
from orchestra.db.session import get_session
from orchestra.domain.identity import CurrentUser
from orchestra.domain.queries import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PageRequest
from orchestra.services import TaskService, build_task_service

USER_ID_HEADER = "X-User-Id"
USER_EMAIL_HEADER = "X-User-Email"


def _extract_user_id(request: Request) -> int | None:
    raw_value = request.headers.get(USER_ID_HEADER)
    if raw_value is None:
        return None
    normalized = raw_value.strip()
    if not normalized.isdigit():
        return None
    parsed = int(normalized)
    return parsed if parsed > 0 else None


async def get_current_user(request: Request) -> CurrentUser:
    """Identity asserted by the authenticating proxy in front of this service."""
    user_id = _extract_user_id(request)
    if user_id is None:
        raise ApiException(
            status.HTTP_401_UNAUTHORIZED,
            "UNAUTHORIZED",
            "Missing or invalid user identity.",
        )
    email = (request.headers.get(USER_EMAIL_HEADER) or "").strip()
    bind_log_context(user_id=user_id)
    return CurrentUser(id=user_id, email=email)


def get_task_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TaskService:
    return build_task_service(session)


def get_page_request(
    page: Annotated[int, Query(ge=0)] = 0,
    size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
) -> PageRequest:
    return PageRequest.of(page, size)


AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]
TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
PageRequestDep = Annotated[PageRequest, Depends(get_page_request)]
