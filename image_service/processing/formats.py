"""Encode policies selected by the detected source format."""

from dataclasses import dataclass
from io import BytesIO
from typing import Callable

from PIL import Image


@dataclass(frozen=True)
class FormatStrategy:
    """How to encode resized pixels and which extension the output gets.

    ``forced_extension`` replaces the source extension when set; otherwise
    the original extension is kept.
    """

    name: str
    pil_format: str
    save_options: tuple[tuple[str, object], ...] = ()
    forced_extension: str | None = None

    def encode(self, image: Image.Image) -> bytes:
        if self.pil_format == "JPEG" and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        buffer = BytesIO()
        image.save(buffer, format=self.pil_format, **dict(self.save_options))
        return buffer.getvalue()

    def extension(self, original_extension: str) -> str:
        return self.forced_extension or original_extension


JPEG = FormatStrategy("jpeg", "JPEG", save_options=(("quality", 80),))
PNG = FormatStrategy("png", "PNG")
WEBP = FormatStrategy("webp", "WEBP", save_options=(("quality", 80),))
# Formats we can decode but do not want to produce
FALLBACK = FormatStrategy("fallback", "JPEG", save_options=(("quality", 80),), forced_extension=".jpg")

FALLBACK_FORMATS = frozenset({"avif", "heif", "heic", "gif", "bmp", "tiff"})

Predicate = Callable[[str], bool]


def _one_of(*names: str) -> Predicate:
    accepted = frozenset(names)
    return lambda fmt: fmt in accepted


class FormatRegistry:
    """Ordered ``(predicate, strategy)`` pairs evaluated top-down.

    Lookups are case-insensitive and never fail: a format no predicate
    accepts gets ``default``.
    """

    def __init__(
        self,
        rules: list[tuple[Predicate, FormatStrategy]] | None = None,
        default: FormatStrategy = JPEG,
    ) -> None:
        self._rules = list(rules) if rules is not None else [
            (_one_of("jpeg", "jpg"), JPEG),
            (_one_of("png"), PNG),
            (_one_of("webp"), WEBP),
            (FALLBACK_FORMATS.__contains__, FALLBACK),
        ]
        self._default = default

    def get(self, format_name: str | None) -> FormatStrategy:
        normalized = (format_name or "").strip().lower()
        for predicate, strategy in self._rules:
            if predicate(normalized):
                return strategy
        return self._default
