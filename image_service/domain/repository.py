"""Persistence interface consumed by the task service and the job handler."""

from typing import Protocol

from image_service.domain.task import Task


class TaskRepository(Protocol):
    async def save(self, task: Task) -> Task:
        """Insert or replace the task stored under ``task.id``."""
        ...

    async def find_by_id(self, task_id: str) -> Task | None:
        ...
