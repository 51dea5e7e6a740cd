"""
Source Fetcher

Downloads source images over HTTP with httpx.
Every failure (bad URL, timeout, transport error, non-2xx, oversize body)
surfaces as FetchError.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

from .errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class HttpFetcher:
    """
    Fetches raw source bytes.

    Usage:
        fetcher = HttpFetcher(timeout=30.0)
        data = await fetcher.fetch(url)
        await fetcher.aclose()
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_bytes: int = 10 * 1024 * 1024,
        user_agent: str = DEFAULT_USER_AGENT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.max_bytes = max_bytes
        self.http_client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={
                "User-Agent": user_agent,
                "Accept": "image/*,*/*;q=0.8",
            },
        )

    async def aclose(self) -> None:
        """Close HTTP client."""
        await self.http_client.aclose()

    async def fetch(self, url: str) -> bytes:
        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise FetchError(f"Invalid URL: {e}") from e
        if parsed.scheme not in ("http", "https"):
            raise FetchError(f"Invalid URL scheme: {parsed.scheme or '(none)'}")
        if not parsed.netloc:
            raise FetchError("Invalid URL host")

        try:
            logger.info(f"[Fetcher] Fetching: {url[:80]}...")
            response = await self.http_client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"[Fetcher] Timeout: {url[:60]}...")
            raise FetchError("Image fetch timeout") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"[Fetcher] HTTP error {e.response.status_code}: {url[:60]}...")
            raise FetchError(f"Failed to fetch image: HTTP {e.response.status_code}") from e
        except httpx.InvalidURL as e:
            raise FetchError(f"Invalid URL: {e}") from e
        except httpx.HTTPError as e:
            logger.warning(f"[Fetcher] Fetch error: {e}")
            raise FetchError(f"Failed to fetch image: {e}") from e

        data = response.content
        if len(data) > self.max_bytes:
            raise FetchError(f"Image too large ({len(data)} bytes, max {self.max_bytes})")

        logger.debug(f"[Fetcher] Fetched {url[:60]}... ({len(data)} bytes)")
        return data
