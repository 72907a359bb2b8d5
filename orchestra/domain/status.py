from __future__ import annotations

from enum import StrEnum


class TaskStatus(StrEnum):
    UNPROCESSED = "UNPROCESSED"
    PROCESSED = "PROCESSED"
    COMPLETED = "COMPLETED"
