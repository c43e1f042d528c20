"""Inline transport: no broker, the job runs before ``enqueue`` returns."""

import logging

from image_service.queue.base import JobHandler
from image_service.queue.jobs import Job

logger = logging.getLogger(__name__)


class SyncTaskQueue:
    def __init__(self, handler: JobHandler) -> None:
        self._handler = handler

    async def enqueue(self, job: Job) -> None:
        logger.info(f"Processing task {job.task_id} inline")
        await self._handler(job)
