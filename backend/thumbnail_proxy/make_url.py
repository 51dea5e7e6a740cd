"""
Print a ready-to-use request URL for a source image.

Usage:
    python -m thumbnail_proxy.make_url https://example.com/photo.jpg
"""

import argparse
from typing import List, Optional

from .models import ColorFilter, ColorFilterName, Resize, SampleFilter, Watermark
from .spec_codec import build_image_path


def sample_specs() -> list:
    """Resize, then watermark, then tint."""
    return [
        Resize(width=500, height=800, filter=SampleFilter.CATMULL_ROM),
        Watermark(x=20, y=20),
        ColorFilter(name=ColorFilterName.MARINE),
    ]


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Print a thumbnail proxy test URL")
    parser.add_argument("source_url", help="URL of the source image")
    parser.add_argument("--base", default="http://localhost:3000", help="Proxy base URL")
    args = parser.parse_args(argv)

    print(f"test url: {args.base.rstrip('/')}{build_image_path(sample_specs(), args.source_url)}")


if __name__ == "__main__":
    main()
