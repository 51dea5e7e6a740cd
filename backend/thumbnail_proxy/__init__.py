"""
Thumbnail Proxy Module

Transforms remote images on the fly. Both the source URL and the list of
operations to apply are carried in the request path.

Features:
- Compact, deterministic spec tokens (resize, watermark, color filter)
- In-memory LRU source cache with single-flight fetching
- Pillow-based transform engine with PNG/JPEG/WebP output
"""

from .errors import (
    ThumbnailError,
    MalformedSpec,
    InvalidOperation,
    FetchError,
    DecodeError,
    EncodeError,
    InvalidCapacity,
)
from .models import (
    ColorFilter,
    ColorFilterName,
    ImageSpec,
    OutputFormat,
    Resize,
    SampleFilter,
    Watermark,
)
from .source_cache import SourceCache
from .engine import TransformEngine
from .pipeline import ThumbnailPipeline, RenderedImage

__all__ = [
    "ThumbnailError",
    "MalformedSpec",
    "InvalidOperation",
    "FetchError",
    "DecodeError",
    "EncodeError",
    "InvalidCapacity",
    "ColorFilter",
    "ColorFilterName",
    "ImageSpec",
    "OutputFormat",
    "Resize",
    "SampleFilter",
    "Watermark",
    "SourceCache",
    "TransformEngine",
    "ThumbnailPipeline",
    "RenderedImage",
]
