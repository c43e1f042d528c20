from pydantic import BaseModel, ConfigDict, Field

from image_service.domain.status import TaskStatus
from image_service.services.task_service import SubmittedTask, TaskStatusView


class TaskCreate(BaseModel):
    original_path: str = Field(min_length=1)


class ImageRead(BaseModel):
    resolution: str
    path: str

    model_config = ConfigDict(from_attributes=True)


class TaskCreated(BaseModel):
    task_id: str
    status: TaskStatus
    price: float

    @classmethod
    def from_submitted(cls, submitted: SubmittedTask) -> "TaskCreated":
        return cls(task_id=submitted.task_id, status=submitted.status, price=float(submitted.price))


class TaskRead(BaseModel):
    task_id: str
    status: TaskStatus
    price: float
    images: list[ImageRead] = []
    error_message: str | None = None

    @classmethod
    def from_view(cls, view: TaskStatusView) -> "TaskRead":
        return cls(
            task_id=view.task_id,
            status=view.status,
            price=float(view.price),
            images=[ImageRead.model_validate(image) for image in view.images],
            error_message=view.error_message,
        )
