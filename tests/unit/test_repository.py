"""Unit tests for SqlTaskRepository."""

from decimal import Decimal

import pytest
from sqlalchemy import update

from image_service.db.models import TaskRecord
from image_service.domain.status import TaskStatus
from image_service.domain.task import ProcessedImage, Task
from image_service.errors import InvalidArgument

IMAGES = [
    ProcessedImage("1024", "photo/1024/0123456789abcdef0123456789abcdef.png"),
    ProcessedImage("800", "photo/800/fedcba9876543210fedcba9876543210.png"),
]


@pytest.mark.asyncio
async def test_save_and_find_pending(sql_repository):
    task = Task.create("https://example.com/photo.png")
    await sql_repository.save(task)

    found = await sql_repository.find_by_id(task.id)

    assert found is not None
    assert found.id == task.id
    assert found.status == TaskStatus.PENDING
    assert found.price == task.price
    assert found.original_reference == task.original_reference
    assert found.images == []
    assert found.error_message is None
    assert found.created_at == task.created_at
    assert found.updated_at == task.updated_at


@pytest.mark.asyncio
async def test_find_by_id_not_found(sql_repository):
    assert await sql_repository.find_by_id("00000000-0000-0000-0000-000000000000") is None


@pytest.mark.asyncio
async def test_save_is_upsert(sql_repository):
    task = Task.create("photo.png")
    await sql_repository.save(task)
    completed = task.complete(IMAGES)

    await sql_repository.save(completed)
    found = await sql_repository.find_by_id(task.id)

    assert found.status == TaskStatus.COMPLETED
    assert found.images == IMAGES
    assert found.updated_at == completed.updated_at


@pytest.mark.asyncio
async def test_save_failed_task(sql_repository):
    task = Task.create("photo.png")
    await sql_repository.save(task)
    await sql_repository.save(task.fail("Failed to download image: HTTP 404"))

    found = await sql_repository.find_by_id(task.id)

    assert found.status == TaskStatus.FAILED
    assert found.error_message == "Failed to download image: HTTP 404"


@pytest.mark.asyncio
async def test_save_returns_domain_task(sql_repository):
    task = Task.create("photo.png")
    saved = await sql_repository.save(task)

    assert isinstance(saved, Task)
    assert saved.id == task.id


@pytest.mark.asyncio
async def test_find_revalidates_price(sql_repository, session_factory):
    task = Task.create("photo.png")
    await sql_repository.save(task)
    async with session_factory() as session:
        await session.execute(
            update(TaskRecord).where(TaskRecord.id == task.id).values(price=Decimal("99.00"))
        )
        await session.commit()

    with pytest.raises(InvalidArgument):
        await sql_repository.find_by_id(task.id)
