"""SQLAlchemy implementation of the task repository."""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from image_service.db.models import TaskRecord
from image_service.domain.price import Price
from image_service.domain.status import TaskStatus
from image_service.domain.task import ProcessedImage, Task


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo; every timestamp we write is UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def to_record(task: Task) -> TaskRecord:
    return TaskRecord(
        id=task.id,
        status=task.status,
        price=task.price.value,
        original_reference=task.original_reference,
        images=[{"resolution": i.resolution, "path": i.path} for i in task.images],
        error_message=task.error_message,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def to_domain(record: TaskRecord) -> Task:
    """Rebuild the aggregate, re-validating status and price."""
    status = record.status if isinstance(record.status, TaskStatus) else TaskStatus.parse(record.status)
    return Task.reconstitute(
        id=record.id,
        status=status,
        price=Price.from_value(record.price),
        original_reference=record.original_reference,
        created_at=_aware(record.created_at),
        updated_at=_aware(record.updated_at),
        images=[ProcessedImage(resolution=i["resolution"], path=i["path"]) for i in record.images or []],
        error_message=record.error_message,
    )


class SqlTaskRepository:
    """Stores tasks with one short-lived session per call.

    ``save`` is an upsert keyed by task id (last writer wins), which is the
    only guarantee the job handler relies on.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, task: Task) -> Task:
        async with self._session_factory() as session:
            record = await session.merge(to_record(task))
            await session.commit()
            return to_domain(record)

    async def find_by_id(self, task_id: str) -> Task | None:
        async with self._session_factory() as session:
            record = await session.get(TaskRecord, task_id)
            return to_domain(record) if record else None
