"""Resize/encode engine with content-addressed output paths."""

import hashlib
import logging
import os
from io import BytesIO
from pathlib import Path, PurePath
from typing import Sequence, Union

from PIL import Image, UnidentifiedImageError

from image_service.domain.task import ProcessedImage
from image_service.errors import (
    DecodeError,
    EncodeError,
    InvalidArgument,
    SourceNotFound,
    StorageError,
)
from image_service.processing.formats import FormatRegistry

logger = logging.getLogger(__name__)

Source = Union[bytes, str, os.PathLike]

DEFAULT_BASE_NAME = "image"
DEFAULT_EXTENSION = ".jpg"


def scaled_height(target_width: int, width: int, height: int) -> int:
    """Height keeping the aspect ratio, rounded half away from zero."""
    # floor(x + 1/2) in integer arithmetic, exact for any size
    return max(1, (2 * target_width * height + width) // (2 * width))


def content_hash(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def output_target(output_dir: str | os.PathLike, relative_path: str) -> Path:
    """Absolute location of ``relative_path``, refusing anything outside ``output_dir``."""
    root = Path(output_dir).resolve()
    target = root.joinpath(*relative_path.split("/")).resolve()
    if not target.is_relative_to(root):
        raise StorageError(f"Output path escapes the output directory: {relative_path}")
    return target


class TransformationEngine:
    """Decode a source once and write one resized copy per target width.

    Outputs land in ``{output_dir}/{base_name}/{width}/{md5}{ext}``. The
    same encoded bytes always map to the same path, so re-running a job
    overwrites files with identical content.
    """

    def __init__(self, registry: FormatRegistry | None = None) -> None:
        self._registry = registry or FormatRegistry()

    def process(
        self,
        source: Source,
        output_dir: str | os.PathLike,
        target_widths: Sequence[int],
        original_filename: str | None = None,
    ) -> list[ProcessedImage]:
        self._validate(source, target_widths)

        if not isinstance(source, (bytes, bytearray)) and not Path(source).is_file():
            raise SourceNotFound(f"Source file does not exist: {source}")

        base_name, extension = self._parse_file_name(source, original_filename)
        image = self._decode(source)
        try:
            return self._resize_all(image, output_dir, target_widths, base_name, extension)
        finally:
            image.close()

    def _resize_all(
        self,
        image: Image.Image,
        output_dir: str | os.PathLike,
        target_widths: Sequence[int],
        base_name: str,
        extension: str,
    ) -> list[ProcessedImage]:
        strategy = self._registry.get(image.format)
        logger.debug(
            f"Decoded {image.format} image {image.width}x{image.height}, "
            f"encoding with {strategy.name} strategy"
        )

        results: list[ProcessedImage] = []
        for target_width in target_widths:
            target_height = scaled_height(target_width, image.width, image.height)
            try:
                resized = image.resize((target_width, target_height), Image.Resampling.LANCZOS)
                encoded = strategy.encode(resized)
            except (OSError, ValueError) as exc:
                raise EncodeError(f"Failed to resize image: {exc}") from exc

            relative_path = "/".join(
                (base_name, str(target_width), f"{content_hash(encoded)}{strategy.extension(extension)}")
            )
            self._write(output_target(output_dir, relative_path), encoded)
            results.append(ProcessedImage(resolution=str(target_width), path=relative_path))

        return results

    @staticmethod
    def _validate(source: Source, target_widths: Sequence[int]) -> None:
        if source is None:
            raise InvalidArgument("Source cannot be empty")
        if isinstance(source, (bytes, bytearray)):
            if len(source) == 0:
                raise InvalidArgument("Source buffer cannot be empty")
        elif not str(source).strip():
            raise InvalidArgument("Source path cannot be empty")

        if not target_widths:
            raise InvalidArgument("Target widths cannot be empty")
        for width in target_widths:
            if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
                raise InvalidArgument(
                    f"Invalid resolution value: {width}. Resolution must be a positive integer"
                )

    @staticmethod
    def _decode(source: Source) -> Image.Image:
        try:
            if isinstance(source, (bytes, bytearray)):
                image = Image.open(BytesIO(source))
            else:
                image = Image.open(source)
            image.load()
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
            raise DecodeError(f"Failed to read image metadata: {exc}") from exc
        return image

    @staticmethod
    def _parse_file_name(source: Source, original_filename: str | None) -> tuple[str, str]:
        if isinstance(source, (bytes, bytearray)):
            if not original_filename:
                return DEFAULT_BASE_NAME, DEFAULT_EXTENSION
            name = PurePath(original_filename.replace("\\", "/")).name
        else:
            name = Path(source).name

        path = PurePath(name)
        # "." and ".." would place outputs outside their own directory
        stem = path.stem if path.stem not in ("", ".", "..") else DEFAULT_BASE_NAME
        return stem, path.suffix.lower() or DEFAULT_EXTENSION

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to write {target}: {exc}") from exc
