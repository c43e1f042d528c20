"""Exponential backoff policy used by the queue transport."""

from dataclasses import dataclass

ATTEMPT_HEADER = "x-attempt"
ERROR_HEADER = "x-error"


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay cannot be negative")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before running ``attempt + 1`` after ``attempt`` failed."""
        return self.base_delay * 2 ** (attempt - 1)

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.max_attempts


def attempt_from_headers(headers: dict | None) -> int:
    """Attempt number of a delivered message; first delivery is attempt 1."""
    try:
        return max(1, int((headers or {}).get(ATTEMPT_HEADER, 1)))
    except (TypeError, ValueError):
        return 1
