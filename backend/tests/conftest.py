"""
Thumbnail Proxy test configuration

Fixtures shared by the test modules:
- in-memory source images generated with Pillow
- a counting fake fetcher (no network access)
- a pipeline wired to that fetcher
"""

import pytest
import sys
from io import BytesIO
from pathlib import Path

from PIL import Image

# 添加 backend 目录到 Python 路径
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from thumbnail_proxy.engine import TransformEngine
from thumbnail_proxy.errors import FetchError
from thumbnail_proxy.pipeline import ThumbnailPipeline
from thumbnail_proxy.source_cache import SourceCache


SOURCE_URL = "https://images.example.com/photos/1562477/photo.png"


# ============================================
# Image Helpers
# ============================================

def make_image(width=10, height=10):
    """RGBA image where every pixel is distinct."""
    img = Image.new("RGBA", (width, height))
    img.putdata([
        ((x * 25) % 256, (y * 25) % 256, (x * y) % 256, 255)
        for y in range(height)
        for x in range(width)
    ])
    return img


def to_png(img):
    output = BytesIO()
    img.save(output, format="PNG")
    return output.getvalue()


def open_image(data):
    img = Image.open(BytesIO(data))
    img.load()
    return img


# ============================================
# Fake Fetcher
# ============================================

class CountingFetcher:
    """
    Serves bytes from a dict and records every call.

    Unknown URLs raise FetchError, like an unreachable host.
    """

    def __init__(self, sources=None):
        self.sources = dict(sources or {})
        self.calls = []

    async def fetch(self, url):
        self.calls.append(url)
        if url not in self.sources:
            raise FetchError(f"Failed to fetch image: {url}")
        return self.sources[url]


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def source_image():
    return make_image(10, 10)


@pytest.fixture
def source_png(source_image):
    return to_png(source_image)


@pytest.fixture
def fetcher(source_png):
    return CountingFetcher({SOURCE_URL: source_png})


@pytest.fixture
def pipeline(fetcher):
    return ThumbnailPipeline(SourceCache(16), fetcher.fetch, TransformEngine())
