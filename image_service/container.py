"""Explicit wiring of the service's long-lived collaborators."""

import logging
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from image_service.clients.fetcher import HttpSourceFetcher
from image_service.clients.rabbitmq import RabbitMQClient
from image_service.config import Settings
from image_service.db.repository import SqlTaskRepository
from image_service.db.session import create_engine, create_schema, create_session_factory
from image_service.processing.engine import TransformationEngine
from image_service.queue.base import TaskQueue
from image_service.queue.retry import RetryPolicy
from image_service.queue.sync import SyncTaskQueue
from image_service.services.processing import ProcessImageHandler

logger = logging.getLogger(__name__)


@dataclass
class Container:
    settings: Settings
    db_engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    repository: SqlTaskRepository
    fetcher: HttpSourceFetcher
    handler: ProcessImageHandler
    rabbitmq: RabbitMQClient | None
    queue: TaskQueue
    retry_policy: RetryPolicy

    async def start(self) -> None:
        Path(self.settings.output_dir).mkdir(parents=True, exist_ok=True)
        await create_schema(self.db_engine)
        if self.rabbitmq:
            await self.rabbitmq.connect()
        logger.info(f"Started with {self.settings.queue_backend} queue backend")

    async def aclose(self) -> None:
        if self.rabbitmq:
            await self.rabbitmq.close()
        await self.fetcher.close()
        await self.db_engine.dispose()


def build_container(settings: Settings) -> Container:
    db_engine = create_engine(settings.database_url)
    session_factory = create_session_factory(db_engine)
    repository = SqlTaskRepository(session_factory)
    fetcher = HttpSourceFetcher(
        timeout=settings.fetch_timeout,
        max_redirects=settings.fetch_max_redirects,
        max_bytes=settings.max_image_size,
    )
    handler = ProcessImageHandler(repository, TransformationEngine(), fetcher, settings.output_dir)

    rabbitmq: RabbitMQClient | None = None
    queue: TaskQueue
    if settings.queue_backend == "rabbitmq":
        rabbitmq = RabbitMQClient(
            settings.rabbitmq_url,
            settings.queue_name,
            prefetch_count=settings.worker_concurrency,
        )
        queue = rabbitmq
    else:
        queue = SyncTaskQueue(handler)

    return Container(
        settings=settings,
        db_engine=db_engine,
        session_factory=session_factory,
        repository=repository,
        fetcher=fetcher,
        handler=handler,
        rabbitmq=rabbitmq,
        queue=queue,
        retry_policy=RetryPolicy(
            max_attempts=settings.retry_max_attempts, base_delay=settings.retry_base_delay
        ),
    )
