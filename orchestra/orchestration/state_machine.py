from __future__ import annotations

import logging
from datetime import datetime

from orchestra.domain.status import TaskStatus

logger = logging.getLogger(__name__)


def initial_status_for(deadline: datetime | None) -> TaskStatus:
    """Default status of a new task when the caller leaves it unset."""
    return TaskStatus.PROCESSED if deadline is not None else TaskStatus.UNPROCESSED


def resolve_creation_status(requested: TaskStatus | None, deadline: datetime | None) -> TaskStatus:
    """
    Status persisted for a new task.

    An explicit status is kept as-is; creation does not apply the
    unprocessed-with-deadline normalization that updates do.
    """
    if requested is not None:
        return requested
    return initial_status_for(deadline)


def normalize_status(status: TaskStatus, deadline: datetime | None) -> TaskStatus:
    """An unprocessed task with a deadline is stored as processed."""
    if status == TaskStatus.UNPROCESSED and deadline is not None:
        logger.debug("Normalizing unprocessed task with deadline to processed")
        return TaskStatus.PROCESSED
    return status


def resolve_update_status(
    current_status: TaskStatus,
    requested: TaskStatus | None,
    deadline: datetime | None,
) -> TaskStatus:
    """
    Status persisted by an update.

    Args:
        current_status: Status of the stored task.
        requested: Status supplied by the caller, None to keep the current one.
        deadline: Deadline the task will have after the update.

    Returns:
        TaskStatus: The normalized target status.
    """
    target_status = requested if requested is not None else current_status
    target_status = normalize_status(target_status, deadline)
    if target_status != current_status:
        logger.info(f"Transitioning task status: {current_status.value} -> {target_status.value}")
    return target_status
