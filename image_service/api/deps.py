from typing import Annotated

from fastapi import Depends, Request

from image_service.config import Settings
from image_service.domain.repository import TaskRepository
from image_service.queue.base import TaskQueue
from image_service.services.task_service import TaskService


async def get_settings(request: Request) -> Settings:
    """Dependency to get the settings the container was built with."""
    return request.app.state.container.settings


async def get_task_repository(request: Request) -> TaskRepository:
    """Dependency to get the repository built at startup."""
    return request.app.state.container.repository


async def get_task_queue(request: Request) -> TaskQueue:
    """Dependency to get the configured queue transport."""
    return request.app.state.container.queue


async def get_task_service(
    repository: Annotated[TaskRepository, Depends(get_task_repository)],
    queue: Annotated[TaskQueue, Depends(get_task_queue)],
    config: Annotated[Settings, Depends(get_settings)],
) -> TaskService:
    """Dependency to get TaskService instance."""
    return TaskService(repository, queue, max_upload_size=config.max_image_size)
