import asyncio
import logging
from typing import Any, Awaitable, Callable

import aio_pika

from image_service.queue.jobs import Job
from image_service.queue.retry import ATTEMPT_HEADER, ERROR_HEADER

logger = logging.getLogger(__name__)

MessageCallback = Callable[[aio_pika.abc.AbstractIncomingMessage], Awaitable[Any]]


class RabbitMQClient:
    """Client for the image-processing queues.

    Three durable queues are declared: the work queue, ``<name>.retry`` whose
    messages dead-letter back into the work queue once their TTL expires, and
    ``<name>.failed`` which keeps jobs that ran out of attempts.
    """

    def __init__(self, url: str, queue_name: str, prefetch_count: int = 1) -> None:
        self._url = url
        self.queue_name = queue_name
        self.retry_queue_name = f"{queue_name}.retry"
        self.failed_queue_name = f"{queue_name}.failed"
        self._prefetch_count = prefetch_count
        self._connection: aio_pika.abc.AbstractRobustConnection | None = None
        self._channel: aio_pika.abc.AbstractChannel | None = None
        self._queue: aio_pika.abc.AbstractQueue | None = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        async with self._lock:
            if self._connection and not self._connection.is_closed:
                return
            self._connection = await aio_pika.connect_robust(self._url)
            self._channel = await self._connection.channel()
            await self._channel.set_qos(prefetch_count=self._prefetch_count)
            self._queue = await self._channel.declare_queue(self.queue_name, durable=True)
            await self._channel.declare_queue(
                self.retry_queue_name,
                durable=True,
                arguments={
                    "x-dead-letter-exchange": "",
                    "x-dead-letter-routing-key": self.queue_name,
                },
            )
            await self._channel.declare_queue(self.failed_queue_name, durable=True)

    async def enqueue(self, job: Job) -> None:
        await self._publish(job.to_message(), self.queue_name)
        logger.info(f"Enqueued job for task {job.task_id}")

    async def publish_retry(self, body: bytes, attempt: int, delay: float) -> None:
        """Redeliver ``body`` as ``attempt`` after ``delay`` seconds."""
        await self._publish(
            body,
            self.retry_queue_name,
            headers={ATTEMPT_HEADER: attempt},
            expiration=delay,
        )

    async def publish_failed(self, body: bytes, attempt: int, error: str) -> None:
        await self._publish(
            body,
            self.failed_queue_name,
            headers={ATTEMPT_HEADER: attempt, ERROR_HEADER: error},
        )

    async def consume(self, callback: MessageCallback) -> None:
        await self.connect()
        assert self._queue  # mypy quiet
        await self._queue.consume(callback, no_ack=False)

    async def _publish(
        self,
        body: bytes,
        routing_key: str,
        headers: dict[str, Any] | None = None,
        expiration: float | None = None,
    ) -> None:
        if not self._channel:
            await self.connect()
        assert self._channel  # mypy quiet
        message = aio_pika.Message(
            body=body,
            headers=headers,
            content_type="application/json",
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
            expiration=expiration,
        )
        await self._channel.default_exchange.publish(message, routing_key=routing_key)

    async def close(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None
            self._channel = None
            self._queue = None
