"""Unit tests for TaskService."""
from unittest.mock import AsyncMock

import pytest

from image_service.domain.price import MAX_PRICE, MIN_PRICE
from image_service.domain.status import TaskStatus
from image_service.domain.task import ProcessedImage
from image_service.errors import InvalidArgument, NotFound
from image_service.queue.jobs import InlineSource, ReferenceSource
from image_service.services.task_service import TaskService


@pytest.mark.asyncio
async def test_submit_creates_pending_task(task_service, repository, queue):
    """Test submitting a reference creates, saves and enqueues a pending task."""
    submitted = await task_service.submit(" https://example.com/photo.jpg ")

    assert submitted.status == TaskStatus.PENDING
    assert MIN_PRICE <= submitted.price.value <= MAX_PRICE

    stored = repository.tasks[submitted.task_id]
    assert stored.status == TaskStatus.PENDING
    assert stored.original_reference == "https://example.com/photo.jpg"
    assert stored.images == []

    [job] = queue.jobs
    assert job.task_id == submitted.task_id
    assert job.source == ReferenceSource(reference="https://example.com/photo.jpg")


@pytest.mark.asyncio
async def test_submit_rejects_empty_reference(task_service, repository, queue):
    with pytest.raises(InvalidArgument):
        await task_service.submit("   ")

    assert repository.saved == []
    assert queue.jobs == []


@pytest.mark.asyncio
async def test_submit_saves_before_enqueue():
    """The job must never reference a task the worker cannot load."""
    order = []

    async def save(task):
        order.append("save")
        return task

    async def enqueue(job):
        order.append("enqueue")

    repository = AsyncMock(save=AsyncMock(side_effect=save))
    queue = AsyncMock(enqueue=AsyncMock(side_effect=enqueue))
    await TaskService(repository, queue).submit("photo.jpg")

    assert order == ["save", "enqueue"]


@pytest.mark.asyncio
async def test_submit_upload_enqueues_inline_bytes(task_service, repository, queue):
    content = b"\x89PNG\r\n\x1a\n fake"
    submitted = await task_service.submit_upload(content, "holiday.png")

    assert repository.tasks[submitted.task_id].original_reference == "holiday.png"
    [job] = queue.jobs
    assert isinstance(job.source, InlineSource)
    assert job.decode_source() == content
    assert job.filename == "holiday.png"


@pytest.mark.asyncio
async def test_submit_upload_rejects_empty_content(task_service, queue):
    with pytest.raises(InvalidArgument):
        await task_service.submit_upload(b"", "holiday.png")
    assert queue.jobs == []


@pytest.mark.asyncio
async def test_get_status_pending(task_service):
    submitted = await task_service.submit("photo.jpg")
    view = await task_service.get_status(submitted.task_id)

    assert view.task_id == submitted.task_id
    assert view.status == TaskStatus.PENDING
    assert view.price == submitted.price
    assert view.images == []
    assert view.error_message is None


@pytest.mark.asyncio
async def test_get_status_completed(task_service, repository):
    submitted = await task_service.submit("photo.jpg")
    images = [ProcessedImage("1024", "photo/1024/a.jpg"), ProcessedImage("800", "photo/800/b.jpg")]
    await repository.save(repository.tasks[submitted.task_id].complete(images))

    view = await task_service.get_status(submitted.task_id)

    assert view.status == TaskStatus.COMPLETED
    assert view.images == images


@pytest.mark.asyncio
async def test_get_status_failed(task_service, repository):
    submitted = await task_service.submit("photo.jpg")
    await repository.save(repository.tasks[submitted.task_id].fail("Source file does not exist"))

    view = await task_service.get_status(submitted.task_id)

    assert view.status == TaskStatus.FAILED
    assert view.error_message == "Source file does not exist"


@pytest.mark.asyncio
async def test_get_status_not_found(task_service):
    with pytest.raises(NotFound):
        await task_service.get_status("00000000-0000-0000-0000-000000000000")


@pytest.mark.asyncio
async def test_get_status_empty_id(task_service):
    with pytest.raises(InvalidArgument):
        await task_service.get_status("  ")


@pytest.mark.asyncio
async def test_submit_upload_rejects_oversize_content(repository, queue):
    service = TaskService(repository, queue, max_upload_size=8)

    with pytest.raises(InvalidArgument, match="maximum size of 8 bytes"):
        await service.submit_upload(b"123456789", "holiday.png")
    assert repository.saved == []
    assert queue.jobs == []
