"""
Thumbnail Pipeline

decode spec token -> resolve source bytes (cache or fetch) -> transform -> encode.

The pipeline is all-or-nothing per request: any stage failure raises a
ThumbnailError and no partial output is produced.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from . import imaging, spec_codec
from .config import ProxyConfig
from .engine import TransformEngine
from .errors import ThumbnailError
from .fetcher import HttpFetcher
from .models import OutputFormat
from .source_cache import FetchFunc, SourceCache

logger = logging.getLogger(__name__)


@dataclass
class RenderedImage:
    """Result of a successful pipeline run."""
    data: bytes
    content_type: str
    cache_hit: bool


class ThumbnailPipeline:
    """
    Composes the spec codec, source cache, fetcher and transform engine.

    One instance is created at startup and shared by every request.
    """

    def __init__(
        self,
        cache: SourceCache,
        fetch: FetchFunc,
        engine: Optional[TransformEngine] = None,
        fetcher: Optional[HttpFetcher] = None,
    ):
        self.cache = cache
        self.fetch = fetch
        self.engine = engine or TransformEngine()
        self._fetcher = fetcher

    @classmethod
    def from_config(cls, config: ProxyConfig) -> "ThumbnailPipeline":
        """Build the pipeline and its collaborators. Raises InvalidCapacity on a bad cache size."""
        cache = SourceCache(config.cache_capacity)
        fetcher = HttpFetcher(timeout=config.fetch_timeout, max_bytes=config.max_source_bytes)

        watermark = imaging.load_watermark(config.watermark_path) if config.watermark_path else None
        engine = TransformEngine(watermark=watermark, max_pixels=config.max_output_pixels)

        logger.info(
            f"[Pipeline] Ready: cache capacity {config.cache_capacity}, "
            f"fetch timeout {config.fetch_timeout}s"
        )
        return cls(cache, fetcher.fetch, engine, fetcher=fetcher)

    async def aclose(self) -> None:
        if self._fetcher is not None:
            await self._fetcher.aclose()

    async def handle(
        self,
        spec_token: str,
        source_url: str,
        output_format: OutputFormat = OutputFormat.PNG,
    ) -> RenderedImage:
        """
        Produce the transformed image for a request.

        Raises:
            ThumbnailError: status_code tells client faults (4xx) from server faults (5xx)
        """
        try:
            specs = spec_codec.decode(spec_token)
            cache_hit = self.cache.is_cached(source_url)
            source = await self.cache.get_or_fetch(source_url, self.fetch)
            # Pillow work is CPU bound, keep it off the event loop
            data = await asyncio.to_thread(self.engine.apply, source, specs, output_format)
        except ThumbnailError as e:
            level = logging.INFO if e.is_client_error else logging.ERROR
            logger.log(level, f"[Pipeline] {type(e).__name__} for {source_url[:60]}: {e.message}")
            raise

        logger.info(f"[Pipeline] Finished processing: {source_url[:60]} ({len(data)} bytes)")
        return RenderedImage(data=data, content_type=output_format.content_type, cache_hit=cache_hit)
