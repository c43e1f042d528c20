"""Shared pytest fixtures for unit and integration tests."""
import os
from io import BytesIO
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from image_service.api import deps
from image_service.api.errors import register_exception_handlers
from image_service.api.routes import health as health_router
from image_service.api.routes import tasks as tasks_router
from image_service.config import Settings
from image_service.db.models import Base
from image_service.db.repository import SqlTaskRepository
from image_service.domain.task import Task
from image_service.processing.engine import TransformationEngine
from image_service.queue.jobs import Job
from image_service.services.task_service import TaskService


class InMemoryTaskRepository:
    """Dict-backed repository recording every save."""

    def __init__(self) -> None:
        self.tasks: dict[str, Task] = {}
        self.saved: list[Task] = []

    async def save(self, task: Task) -> Task:
        self.tasks[task.id] = task
        self.saved.append(task)
        return task

    async def find_by_id(self, task_id: str) -> Task | None:
        return self.tasks.get(task_id)


class RecordingQueue:
    """Queue transport that only remembers what was enqueued."""

    def __init__(self) -> None:
        self.jobs: list[Job] = []

    async def enqueue(self, job: Job) -> None:
        self.jobs.append(job)


def make_image_bytes(width: int, height: int, fmt: str = "PNG", mode: str = "RGB") -> bytes:
    """Encode a small synthetic image in ``fmt``."""
    image = Image.linear_gradient("L").resize((width, height))
    if mode != "L":
        image = image.convert(mode)
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def repository() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture
def engine() -> TransformationEngine:
    return TransformationEngine()


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / "output"
    path.mkdir()
    return path


@pytest.fixture
def task_service(repository, queue) -> TaskService:
    return TaskService(repository, queue)


@pytest.fixture
def database_url(tmp_path):
    """SQLite by default; Postgres via TEST_DATABASE_URL or TEST_POSTGRES_CONTAINER=1."""
    test_db_url = os.getenv("TEST_DATABASE_URL")
    if test_db_url:
        yield test_db_url
        return
    if os.getenv("TEST_POSTGRES_CONTAINER"):
        from testcontainers.postgres import PostgresContainer

        with PostgresContainer("postgres:14-alpine", driver="asyncpg") as postgres:
            yield postgres.get_connection_url()
        return
    yield f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}"


@pytest_asyncio.fixture
async def session_factory(database_url) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    test_engine = create_async_engine(database_url, echo=False, poolclass=NullPool)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    await test_engine.dispose()


@pytest_asyncio.fixture
async def sql_repository(session_factory) -> SqlTaskRepository:
    return SqlTaskRepository(session_factory)


@pytest_asyncio.fixture
async def test_app(repository, queue) -> FastAPI:
    """Create FastAPI test application with overridden dependencies."""
    app = FastAPI(title="Test Image Tasks Service")
    app.dependency_overrides[deps.get_task_repository] = lambda: repository
    app.dependency_overrides[deps.get_task_queue] = lambda: queue
    app.dependency_overrides[deps.get_settings] = lambda: Settings(max_image_size=1024 * 1024)
    app.include_router(health_router.router)
    app.include_router(tasks_router.router, prefix="/api/v1")
    register_exception_handlers(app)
    return app


@pytest_asyncio.fixture
async def test_client(test_app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Create test HTTP client."""
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
