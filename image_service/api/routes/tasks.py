from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status

from image_service.api.deps import get_task_service
from image_service.db.schemas import TaskCreate, TaskCreated, TaskRead
from image_service.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=TaskCreated, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate, svc: Annotated[TaskService, Depends(get_task_service)]
) -> TaskCreated:
    """Create a pending task and enqueue it. Processing is handled by the workers."""
    submitted = await svc.submit(task_in.original_path)
    return TaskCreated.from_submitted(submitted)


@router.post("/upload", response_model=TaskCreated, status_code=status.HTTP_201_CREATED)
async def upload_task(
    svc: Annotated[TaskService, Depends(get_task_service)],
    file: UploadFile = File(...),
) -> TaskCreated:
    """Create a pending task from an uploaded image file."""
    content = await file.read()
    submitted = await svc.submit_upload(content, file.filename or "")
    return TaskCreated.from_submitted(submitted)


@router.get("/{task_id}", response_model=TaskRead, response_model_exclude_none=True)
async def get_task(
    task_id: str, svc: Annotated[TaskService, Depends(get_task_service)]
) -> TaskRead:
    view = await svc.get_status(task_id)
    return TaskRead.from_view(view)
