"""
Thumbnail Proxy Configuration

Read once from the environment at startup.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ProxyConfig:
    """Configuration for the thumbnail proxy service."""
    # Cache settings
    cache_capacity: int = 10240         # Max cached source images

    # Fetch settings
    fetch_timeout: float = 30.0         # Source download timeout in seconds
    max_source_mb: int = 10             # Max source size in MB

    # Transform settings
    watermark_path: Optional[str] = None  # Overlay image, built-in badge if unset
    max_output_pixels: int = 89478485   # Largest resize target (width * height)

    # Server settings
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def max_source_bytes(self) -> int:
        return self.max_source_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "ProxyConfig":
        return cls(
            cache_capacity=int(os.getenv("THUMBNAIL_CACHE_CAPACITY", "10240")),
            fetch_timeout=float(os.getenv("THUMBNAIL_FETCH_TIMEOUT", "30")),
            max_source_mb=int(os.getenv("THUMBNAIL_MAX_SOURCE_MB", "10")),
            watermark_path=os.getenv("THUMBNAIL_WATERMARK_PATH") or None,
            max_output_pixels=int(os.getenv("THUMBNAIL_MAX_OUTPUT_PIXELS", "89478485")),
            host=os.getenv("THUMBNAIL_HOST", "127.0.0.1"),
            port=int(os.getenv("THUMBNAIL_PORT", "3000")),
            log_level=os.getenv("THUMBNAIL_LOG_LEVEL", "INFO").upper(),
        )
