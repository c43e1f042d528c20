from typing import Awaitable, Callable, Protocol

from image_service.queue.jobs import Job

JobHandler = Callable[[Job], Awaitable[object]]


class TaskQueue(Protocol):
    """Transport that hands jobs to the processing side."""

    async def enqueue(self, job: Job) -> None:
        ...
