"""Task aggregate and the images it produces."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Iterable

from image_service.domain.price import Price
from image_service.domain.status import TaskStatus
from image_service.errors import InvalidArgument, InvalidTransition


@dataclass(frozen=True)
class ProcessedImage:
    resolution: str
    path: str


def _now_after(previous: datetime) -> datetime:
    """Current UTC time, strictly later than ``previous``."""
    now = datetime.now(timezone.utc)
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


@dataclass(frozen=True)
class Task:
    """Image processing request.

    Instances are never mutated: ``complete`` and ``fail`` return a new Task
    and the caller is responsible for persisting it.
    """

    id: str
    status: TaskStatus
    price: Price
    original_reference: str
    created_at: datetime
    updated_at: datetime
    _images: tuple[ProcessedImage, ...] = field(default=(), repr=False)
    error_message: str | None = None

    @classmethod
    def create(cls, original_reference: str) -> "Task":
        reference = (original_reference or "").strip()
        if not reference:
            raise InvalidArgument("Original path cannot be empty")
        now = datetime.now(timezone.utc)
        return cls(
            id=str(uuid.uuid4()),
            status=TaskStatus.PENDING,
            price=Price.random(),
            original_reference=reference,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def reconstitute(
        cls,
        id: str,
        status: TaskStatus,
        price: Price,
        original_reference: str,
        created_at: datetime,
        updated_at: datetime,
        images: Iterable[ProcessedImage] = (),
        error_message: str | None = None,
    ) -> "Task":
        """Rebuild a task from persisted fields."""
        return cls(
            id=id,
            status=status,
            price=price,
            original_reference=original_reference,
            created_at=created_at,
            updated_at=updated_at,
            _images=tuple(images),
            error_message=error_message,
        )

    @property
    def images(self) -> list[ProcessedImage]:
        return list(self._images)

    @property
    def is_pending(self) -> bool:
        return self.status is TaskStatus.PENDING

    def complete(self, images: Iterable[ProcessedImage]) -> "Task":
        images = list(images or [])
        if not images:
            raise InvalidArgument("Cannot complete task without images")
        for image in images:
            if not (image.resolution or "").strip():
                raise InvalidArgument("Image resolution cannot be empty")
            if not (image.path or "").strip():
                raise InvalidArgument("Image path cannot be empty")

        # a task receives its images once, even though completed -> completed
        # is a legal status edge
        if self.status is TaskStatus.COMPLETED:
            raise InvalidTransition("Task is already completed")
        status = self.status.to_completed()
        return replace(
            self,
            status=status,
            _images=tuple(images),
            updated_at=_now_after(self.updated_at),
        )

    def fail(self, error_message: str) -> "Task":
        message = (error_message or "").strip()
        if not message:
            raise InvalidArgument("Error message cannot be empty")

        status = self.status.to_failed()
        if self.status is TaskStatus.FAILED:
            return self
        return replace(
            self,
            status=status,
            error_message=message,
            updated_at=_now_after(self.updated_at),
        )
