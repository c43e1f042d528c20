"""Domain model: tasks, their status machine and price."""

from image_service.domain.price import Price
from image_service.domain.repository import TaskRepository
from image_service.domain.status import TaskStatus
from image_service.domain.task import ProcessedImage, Task

__all__ = ["Price", "ProcessedImage", "Task", "TaskRepository", "TaskStatus"]
