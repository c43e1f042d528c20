"""Service layer for submitting image tasks and reading their status."""

import logging
from dataclasses import dataclass

from image_service.domain.price import Price
from image_service.domain.repository import TaskRepository
from image_service.domain.status import TaskStatus
from image_service.domain.task import ProcessedImage, Task
from image_service.errors import InvalidArgument, NotFound
from image_service.queue.base import TaskQueue
from image_service.queue.jobs import Job

DEFAULT_MAX_UPLOAD_SIZE = 10 * 1024 * 1024

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmittedTask:
    task_id: str
    status: TaskStatus
    price: Price


@dataclass(frozen=True)
class TaskStatusView:
    task_id: str
    status: TaskStatus
    price: Price
    images: list[ProcessedImage]
    error_message: str | None = None

    @classmethod
    def from_task(cls, task: Task) -> "TaskStatusView":
        return cls(
            task_id=task.id,
            status=task.status,
            price=task.price,
            images=task.images,
            error_message=task.error_message,
        )


class TaskService:
    """Creates tasks and hands them to the queue. Processing happens in the workers."""

    def __init__(
        self,
        repository: TaskRepository,
        queue: TaskQueue,
        max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE,
    ) -> None:
        self.repository = repository
        self.queue = queue
        self.max_upload_size = max_upload_size

    async def submit(self, original_reference: str) -> SubmittedTask:
        """Create a pending task for a URL or path and enqueue its job."""
        task = Task.create(original_reference)
        await self.repository.save(task)
        await self.queue.enqueue(Job.create(task.id, task.original_reference))
        logger.info(f"Submitted task {task.id} for {task.original_reference}")
        return SubmittedTask(task_id=task.id, status=task.status, price=task.price)

    async def submit_upload(self, content: bytes, filename: str) -> SubmittedTask:
        """Create a pending task for uploaded bytes; the filename is the original reference."""
        if not content:
            raise InvalidArgument("Uploaded image cannot be empty")
        if len(content) > self.max_upload_size:
            raise InvalidArgument(f"Image exceeds maximum size of {self.max_upload_size} bytes")
        task = Task.create(filename)
        await self.repository.save(task)
        await self.queue.enqueue(Job.create(task.id, content, filename=task.original_reference))
        logger.info(f"Submitted task {task.id} for upload {task.original_reference}")
        return SubmittedTask(task_id=task.id, status=task.status, price=task.price)

    async def get_status(self, task_id: str) -> TaskStatusView:
        task_id = (task_id or "").strip()
        if not task_id:
            raise InvalidArgument("TaskId cannot be empty")
        task = await self.repository.find_by_id(task_id)
        if not task:
            raise NotFound(f"Task not found: {task_id}")
        return TaskStatusView.from_task(task)
