"""Database layer: SQLModel tables, async engine wiring and repositories."""

from orchestra.domain.status import TaskStatus

__all__ = ["TaskStatus"]
