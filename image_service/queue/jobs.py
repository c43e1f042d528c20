"""Job message carried across the queue boundary."""

import base64
import binascii
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from image_service.errors import InvalidArgument


class InlineSource(BaseModel):
    """Raw image bytes, base64 encoded for transport."""

    kind: Literal["inline"] = "inline"
    data: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_bytes(cls, content: bytes) -> "InlineSource":
        return cls(data=base64.b64encode(content).decode("ascii"))

    @field_validator("data")
    @classmethod
    def _check_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("data is not valid base64") from exc
        return value

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data, validate=True)


class ReferenceSource(BaseModel):
    """URL or filesystem path, carried verbatim."""

    kind: Literal["reference"] = "reference"
    reference: str

    model_config = ConfigDict(frozen=True)


JobSource = Annotated[Union[InlineSource, ReferenceSource], Field(discriminator="kind")]


class Job(BaseModel):
    task_id: str
    source: JobSource
    filename: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def create(cls, task_id: str, source: bytes | str, filename: str | None = None) -> "Job":
        if not task_id or not task_id.strip():
            raise InvalidArgument("Task ID cannot be empty")
        if source is None:
            raise InvalidArgument("Image source cannot be null")

        if isinstance(source, (bytes, bytearray)):
            encoded: InlineSource | ReferenceSource = InlineSource.from_bytes(bytes(source))
        elif isinstance(source, str):
            encoded = ReferenceSource(reference=source)
        else:
            raise InvalidArgument(f"Unsupported image source type: {type(source).__name__}")
        return cls(task_id=task_id.strip(), source=encoded, filename=filename)

    def decode_source(self) -> bytes | str:
        if isinstance(self.source, InlineSource):
            return self.source.to_bytes()
        if isinstance(self.source, ReferenceSource):
            return self.source.reference
        raise InvalidArgument(f"Unknown image source kind: {self.source!r}")

    def to_message(self) -> bytes:
        return self.model_dump_json().encode()

    @classmethod
    def from_message(cls, body: bytes | str) -> "Job":
        return cls.model_validate_json(body)
