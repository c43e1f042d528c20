import enum

from image_service.errors import InvalidArgument, InvalidTransition


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: str) -> "TaskStatus":
        try:
            return cls(value)
        except ValueError as exc:
            raise InvalidArgument(f"Invalid task status: {value}") from exc

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.PENDING

    def to_pending(self) -> "TaskStatus":
        if self.is_terminal:
            raise _forbidden(self, TaskStatus.PENDING)
        return self

    def to_completed(self) -> "TaskStatus":
        if self is TaskStatus.FAILED:
            raise _forbidden(self, TaskStatus.COMPLETED)
        return TaskStatus.COMPLETED

    def to_failed(self) -> "TaskStatus":
        if self is TaskStatus.COMPLETED:
            raise _forbidden(self, TaskStatus.FAILED)
        return TaskStatus.FAILED


def _forbidden(current: TaskStatus, target: TaskStatus) -> InvalidTransition:
    return InvalidTransition(f"Cannot transition from {current.value} to {target.value}")
