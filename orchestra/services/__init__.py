from orchestra.services.task_service import TaskService, build_task_service

__all__ = ["TaskService", "build_task_service"]
