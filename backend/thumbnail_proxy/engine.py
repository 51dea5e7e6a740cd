"""
Transform Engine

Applies an ordered list of operations to a source image and encodes the result.
Operations run strictly in list order, each one consuming the previous image.
"""

import logging
from typing import Optional, Sequence

from PIL import Image

from . import imaging
from .errors import InvalidOperation
from .models import ColorFilter, Operation, OutputFormat, Resize, Watermark

logger = logging.getLogger(__name__)

# Pillow's own decompression-bomb threshold
DEFAULT_MAX_PIXELS = 89478485


class TransformEngine:
    """
    Usage:
        engine = TransformEngine()
        png = engine.apply(source_bytes, [Resize(width=5, height=5)], OutputFormat.PNG)
    """

    def __init__(self, watermark: Optional[Image.Image] = None, max_pixels: int = DEFAULT_MAX_PIXELS):
        self.max_pixels = max_pixels
        self.watermark = watermark if watermark is not None else imaging.default_watermark()
        if self.watermark.mode != "RGBA":
            self.watermark = self.watermark.convert("RGBA")

    def apply(
        self,
        source: bytes,
        specs: Sequence[Operation],
        output_format: OutputFormat = OutputFormat.PNG,
    ) -> bytes:
        """
        Decode `source`, run `specs` in order and encode as `output_format`.

        Raises:
            DecodeError: source bytes are not an image
            InvalidOperation: an operation has out-of-range parameters
            EncodeError: the output could not be produced
        """
        img = imaging.decode_image(source)
        logger.debug(f"[Engine] Decoded {img.width}x{img.height}, applying {len(specs)} operations")

        for spec in specs:
            img = self._apply_one(img, spec)

        return imaging.encode_image(img, output_format)

    def _apply_one(self, img: Image.Image, spec: Operation) -> Image.Image:
        if isinstance(spec, Resize):
            if spec.width == 0 or spec.height == 0:
                raise InvalidOperation(f"Resize dimensions must be nonzero, got {spec.width}x{spec.height}")
            if spec.width * spec.height > self.max_pixels:
                raise InvalidOperation(
                    f"Resize to {spec.width}x{spec.height} exceeds the {self.max_pixels} pixel limit"
                )
            return imaging.resize(img, spec.width, spec.height, spec.filter)

        if isinstance(spec, Watermark):
            return imaging.composite_overlay(img, self.watermark, spec.x, spec.y)

        if isinstance(spec, ColorFilter):
            return imaging.apply_named_filter(img, spec.name)

        raise InvalidOperation(f"Unsupported operation: {type(spec).__name__}")
