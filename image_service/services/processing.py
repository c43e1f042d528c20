"""Job handler: runs one queued job through the task lifecycle."""

import asyncio
import logging
from typing import Sequence

from image_service.clients.fetcher import SourceFetcher, is_url
from image_service.domain.repository import TaskRepository
from image_service.domain.task import ProcessedImage, Task
from image_service.processing.engine import TransformationEngine
from image_service.queue.jobs import Job

logger = logging.getLogger(__name__)

# Output widths are fixed; clients cannot pick their own
DEFAULT_RESOLUTIONS: tuple[int, ...] = (1024, 800)
NO_IMAGES_MESSAGE = "No images generated during processing"


class ProcessImageHandler:
    def __init__(
        self,
        repository: TaskRepository,
        engine: TransformationEngine,
        fetcher: SourceFetcher,
        output_dir: str,
        resolutions: Sequence[int] = DEFAULT_RESOLUTIONS,
    ) -> None:
        self.repository = repository
        self.engine = engine
        self.fetcher = fetcher
        self.output_dir = output_dir
        self.resolutions = list(resolutions)

    async def __call__(self, job: Job) -> Task | None:
        return await self.handle(job)

    async def handle(self, job: Job) -> Task | None:
        """Process ``job`` and persist the resulting task.

        Returns the stored task, or ``None`` when the task no longer exists.
        A task that is not pending is returned untouched, so redelivered jobs
        do no work. Any error while fetching or transforming the source fails
        the task; repository errors propagate so the transport can retry.
        """
        task = await self.repository.find_by_id(job.task_id)
        if not task:
            logger.warning(f"Task {job.task_id} not found, skipping")
            return None
        if not task.is_pending:
            logger.info(f"Task {task.id} is already {task.status.value}, skipping")
            return task

        logger.info(f"Processing task {task.id}")
        try:
            images = await self._transform(job)
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Task {task.id} failed: {exc}", exc_info=True)
            return await self.repository.save(task.fail(str(exc) or repr(exc)))

        if not images:
            logger.error(f"Task {task.id} produced no images")
            return await self.repository.save(task.fail(NO_IMAGES_MESSAGE))

        completed = task.complete(images)
        logger.info(f"Task {task.id} completed with {len(images)} image(s)")
        return await self.repository.save(completed)

    async def _transform(self, job: Job) -> list[ProcessedImage]:
        source = job.decode_source()
        filename = job.filename
        if isinstance(source, str) and is_url(source):
            fetched = await self.fetcher.fetch(source)
            source, filename = fetched.content, filename or fetched.filename

        return await asyncio.to_thread(
            self.engine.process, source, self.output_dir, self.resolutions, filename
        )
