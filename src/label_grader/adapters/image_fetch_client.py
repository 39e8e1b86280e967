"""Label image download client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

ALLOWED_SCHEMES = frozenset({"http", "https"})
DEFAULT_MAX_IMAGE_BYTES = 10 * 1024 * 1024


class ImageRejectedError(RuntimeError):
    """Raised when a label image cannot be accepted for analysis."""


class ImageTooLargeError(ImageRejectedError):
    """Raised when a label image exceeds the configured size limit."""


class ImageFetchClient(Protocol):
    """Interface for downloading label images."""

    async def fetch_image_bytes(self, url: str) -> bytes:
        """Download an image and return its bytes."""


@dataclass
class HttpxImageFetchClient(ImageFetchClient):
    """Image download client using httpx.

    Only http(s) URLs are fetched. When ``allowed_hosts`` is set, the
    requested host and every redirect target must be listed. Bodies larger
    than ``max_bytes`` are rejected while streaming.
    """

    http_client: httpx.AsyncClient
    timeout_seconds: float = 20
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    allowed_hosts: frozenset[str] | None = None
    max_redirects: int = 5

    @classmethod
    def create(
        cls,
        timeout_seconds: float = 20,
        max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
        allowed_hosts: frozenset[str] | None = None,
    ) -> "HttpxImageFetchClient":
        """Create an image client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
            max_bytes=max_bytes,
            allowed_hosts=allowed_hosts,
        )

    async def fetch_image_bytes(self, url: str) -> bytes:
        """Download image bytes, following redirects one hop at a time."""
        try:
            request_url = httpx.URL(url)
            for _ in range(self.max_redirects + 1):
                self._check_url(request_url)
                async with self.http_client.stream(
                    "GET", request_url, timeout=self.timeout_seconds
                ) as response:
                    if response.is_redirect:
                        request_url = response.url.join(response.headers["location"])
                        continue
                    response.raise_for_status()
                    return await self._read_limited(response)
        except httpx.InvalidURL as exc:
            raise ImageRejectedError(f"Invalid image URL: {exc}") from exc
        raise ImageRejectedError("Too many redirects")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _check_url(self, url: httpx.URL) -> None:
        if url.scheme not in ALLOWED_SCHEMES:
            raise ImageRejectedError(f"Unsupported URL scheme: {url.scheme!r}")
        if self.allowed_hosts is not None and url.host not in self.allowed_hosts:
            raise ImageRejectedError(f"Image host not allowed: {url.host}")

    async def _read_limited(self, response: httpx.Response) -> bytes:
        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_bytes:
            raise ImageTooLargeError("Image exceeds the size limit")
        content = bytearray()
        async for chunk in response.aiter_bytes():
            content.extend(chunk)
            if len(content) > self.max_bytes:
                raise ImageTooLargeError("Image exceeds the size limit")
        return bytes(content)


def parse_allowed_hosts(raw: str | None) -> frozenset[str] | None:
    """Parse a comma-separated host allowlist; empty or ``*`` allows any host."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    hosts = {chunk.strip().lower() for chunk in cleaned.split(",") if chunk.strip()}
    return frozenset(hosts) or None
