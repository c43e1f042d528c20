from image_service.queue.base import TaskQueue
from image_service.queue.jobs import InlineSource, Job, ReferenceSource
from image_service.queue.retry import RetryPolicy
from image_service.queue.sync import SyncTaskQueue

__all__ = ["InlineSource", "Job", "ReferenceSource", "RetryPolicy", "SyncTaskQueue", "TaskQueue"]
