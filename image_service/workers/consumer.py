import asyncio
import logging

import aio_pika
from pydantic import ValidationError

from image_service.clients.rabbitmq import RabbitMQClient
from image_service.config import settings
from image_service.container import build_container
from image_service.logging_config import setup_logging
from image_service.queue.base import JobHandler
from image_service.queue.jobs import Job
from image_service.queue.retry import RetryPolicy, attempt_from_headers

logger = logging.getLogger(__name__)


class ImageWorker:
    """Consumes image jobs; up to ``prefetch_count`` run concurrently.

    A job whose handler raises is republished with exponential backoff
    until ``retry_policy.max_attempts`` is reached, then parked in the
    failed queue. The original delivery is always acked.
    """

    def __init__(
        self,
        client: RabbitMQClient,
        handler: JobHandler,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._client = client
        self._handler = handler
        self._retry_policy = retry_policy or RetryPolicy()

    async def start(self) -> None:
        await self._client.consume(self.process_message)
        logger.info("Worker started. Waiting for messages...")

    async def stop(self) -> None:
        await self._client.close()

    async def process_message(self, message: aio_pika.abc.AbstractIncomingMessage) -> None:
        # requeue only if we could not even hand the message to retry/failed queues
        async with message.process(requeue=True):
            attempt = attempt_from_headers(message.headers)
            try:
                job = Job.from_message(message.body)
            except ValidationError as exc:
                logger.error(f"Discarding malformed job: {exc}")
                await self._client.publish_failed(message.body, attempt, f"Malformed job: {exc}")
                return

            logger.info(f"Processing task {job.task_id} (attempt {attempt})")
            try:
                await self._handler(job)
            except Exception as exc:  # noqa: BLE001
                error_message = str(exc) if str(exc) else repr(exc)
                logger.error(
                    f"Job for task {job.task_id} failed on attempt {attempt}: {error_message}",
                    exc_info=True,
                )
                await self._reschedule(message.body, job, attempt, error_message)

    async def _reschedule(self, body: bytes, job: Job, attempt: int, error_message: str) -> None:
        if self._retry_policy.should_retry(attempt):
            delay = self._retry_policy.delay_for(attempt)
            await self._client.publish_retry(body, attempt + 1, delay)
            logger.info(f"Task {job.task_id} scheduled for attempt {attempt + 1} in {delay}s")
            return
        await self._client.publish_failed(body, attempt, error_message)
        logger.warning(f"Task {job.task_id} gave up after {attempt} attempt(s)")


async def main() -> None:
    setup_logging()
    container = build_container(settings)
    if not container.rabbitmq:
        raise SystemExit("The worker needs IMAGES_QUEUE_BACKEND=rabbitmq")
    await container.start()
    worker = ImageWorker(container.rabbitmq, container.handler, container.retry_policy)
    await worker.start()
    try:
        while True:
            await asyncio.sleep(1)
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Worker interrupted")
    finally:
        await container.aclose()


if __name__ == "__main__":
    asyncio.run(main())
