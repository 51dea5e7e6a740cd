"""
Imaging Primitives

Thin layer over Pillow exposing only what the transform engine needs:
decode, resize, overlay composite, named color filter, encode.
All images handled here are RGBA.
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import Dict, Tuple

from PIL import Image, ImageDraw, ImageOps

from .errors import DecodeError, EncodeError, InvalidOperation
from .models import ColorFilterName, OutputFormat, SampleFilter

logger = logging.getLogger(__name__)

# Pillow has no Gaussian kernel; Hamming is the closest smooth window it offers
RESAMPLE_FILTERS: Dict[SampleFilter, Image.Resampling] = {
    SampleFilter.NEAREST: Image.Resampling.NEAREST,
    SampleFilter.TRIANGLE: Image.Resampling.BILINEAR,
    SampleFilter.CATMULL_ROM: Image.Resampling.BICUBIC,
    SampleFilter.GAUSSIAN: Image.Resampling.HAMMING,
    SampleFilter.LANCZOS3: Image.Resampling.LANCZOS,
}

# Tint color and blend strength per filter
TINTS: Dict[ColorFilterName, Tuple[Tuple[int, int, int], float]] = {
    ColorFilterName.OCEANIC: ((0, 89, 173), 0.3),
    ColorFilterName.ISLANDS: ((0, 24, 95), 0.3),
    ColorFilterName.MARINE: ((0, 14, 119), 0.3),
    ColorFilterName.SEAGREEN: ((0, 68, 62), 0.3),
    ColorFilterName.FLAGBLUE: ((0, 0, 131), 0.3),
    ColorFilterName.LIQUID: ((0, 10, 75), 0.3),
    ColorFilterName.DIAMANTE: ((30, 82, 87), 0.3),
}

SAVE_OPTIONS = {
    OutputFormat.PNG: {"format": "PNG"},
    OutputFormat.JPEG: {"format": "JPEG", "quality": 90},
    OutputFormat.WEBP: {"format": "WEBP", "quality": 90, "method": 4},
}


def decode_image(data: bytes) -> Image.Image:
    """Decode bytes into an RGBA image, raising DecodeError if they are not an image."""
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (OSError, ValueError, SyntaxError, EOFError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Source is not a recognizable image: {e}") from e

    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return img


def resize(img: Image.Image, width: int, height: int, sample_filter: SampleFilter) -> Image.Image:
    try:
        return img.resize((width, height), RESAMPLE_FILTERS[sample_filter])
    except (OverflowError, ValueError, MemoryError) as e:
        raise InvalidOperation(f"Cannot resize to {width}x{height}: {e}") from e


def composite_overlay(img: Image.Image, overlay: Image.Image, x: int, y: int) -> Image.Image:
    """
    Alpha-composite `overlay` onto `img` with its top-left corner at (x, y).

    The overlay is clipped at the canvas edge; an overlay entirely outside
    the canvas leaves the image unchanged.
    """
    if x >= img.width or y >= img.height:
        return img

    visible = overlay.crop((0, 0, min(overlay.width, img.width - x), min(overlay.height, img.height - y)))
    result = img.copy()
    result.alpha_composite(visible, dest=(x, y))
    return result


def apply_named_filter(img: Image.Image, name: ColorFilterName) -> Image.Image:
    alpha = img.getchannel("A")
    rgb = img.convert("RGB")

    if name == ColorFilterName.GRAYSCALE:
        rgb = ImageOps.grayscale(rgb).convert("RGB")
    else:
        color, strength = TINTS[name]
        rgb = Image.blend(rgb, Image.new("RGB", img.size, color), strength)

    rgb.putalpha(alpha)
    return rgb


def encode_image(img: Image.Image, output_format: OutputFormat) -> bytes:
    """Serialize an image, raising EncodeError on any library fault."""
    if output_format == OutputFormat.JPEG:
        # JPEG has no alpha channel
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.getchannel("A"))
        img = background

    output = BytesIO()
    try:
        img.save(output, **SAVE_OPTIONS[output_format])
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"[Imaging] Failed to encode {output_format.value}: {e}")
        raise EncodeError(f"Failed to encode image as {output_format.value}") from e
    return output.getvalue()


def load_watermark(path: str) -> Image.Image:
    """Load a watermark overlay from disk."""
    return decode_image(Path(path).read_bytes())


def default_watermark(size: int = 64) -> Image.Image:
    """Built-in watermark: a translucent white ring."""
    badge = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(badge)
    inset = max(1, size // 8)
    draw.ellipse(
        (inset, inset, size - inset - 1, size - inset - 1),
        outline=(255, 255, 255, 180),
        width=max(1, size // 10),
    )
    return badge
