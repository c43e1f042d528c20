"""Download remote source images."""

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Protocol
from urllib.parse import unquote, urlparse

import httpx

from image_service.errors import SourceFetchError

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "image.jpg"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class FetchedSource:
    content: bytes
    filename: str


class SourceFetcher(Protocol):
    async def fetch(self, url: str) -> FetchedSource:
        ...


def is_url(reference: str) -> bool:
    return reference.startswith(("http://", "https://"))


def filename_from_url(url: str) -> str:
    """Suggested filename: the last path segment, ``.jpg`` when it has no extension."""
    name = PurePosixPath(unquote(urlparse(url).path)).name
    if name in ("", ".", ".."):
        return DEFAULT_FILENAME
    if not PurePosixPath(name).suffix:
        return f"{name}.jpg"
    return name


class HttpSourceFetcher:
    """Fetch bytes over HTTP(S), following a bounded number of redirects."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        max_redirects: int = 5,
        max_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, max_redirects=max_redirects)
        self._max_bytes = max_bytes

    async def fetch(self, url: str) -> FetchedSource:
        logger.info(f"Downloading source image {url}")
        try:
            async with self._client.stream("GET", url, follow_redirects=True) as response:
                if not response.is_success:
                    raise SourceFetchError(
                        f"Failed to download image: HTTP {response.status_code}"
                    )
                content = await self._read_limited(response)
                final_url = str(response.url)
        except httpx.TooManyRedirects as exc:
            raise SourceFetchError(f"Too many redirects while downloading {url}") from exc
        except httpx.HTTPError as exc:
            raise SourceFetchError(f"Failed to download image from URL: {exc}") from exc
        except (httpx.InvalidURL, UnicodeError) as exc:
            raise SourceFetchError(f"Invalid image URL {url!r}: {exc}") from exc

        if not content:
            raise SourceFetchError(f"Downloaded image from {url} is empty")

        # name the file after the final URL so redirects to a real file keep its extension
        return FetchedSource(content=content, filename=filename_from_url(final_url))

    async def _read_limited(self, response: httpx.Response) -> bytes:
        too_large = f"Image exceeds maximum size of {self._max_bytes} bytes"
        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self._max_bytes:
            raise SourceFetchError(too_large)

        chunks: list[bytes] = []
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > self._max_bytes:
                raise SourceFetchError(too_large)
            chunks.append(chunk)
        return b"".join(chunks)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
