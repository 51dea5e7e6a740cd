"""
Thumbnail Proxy Models

Pydantic models for the transform operations carried in a spec token.
"""

from __future__ import annotations
from typing import Annotated, List, Literal, Union
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


# ============================================
# Enums
# ============================================

class SampleFilter(str, Enum):
    """Resampling filter used by resize"""
    NEAREST = "nearest"
    TRIANGLE = "triangle"
    CATMULL_ROM = "catmullrom"
    GAUSSIAN = "gaussian"
    LANCZOS3 = "lanczos3"


class ColorFilterName(str, Enum):
    """Named color filters"""
    OCEANIC = "oceanic"
    ISLANDS = "islands"
    MARINE = "marine"
    SEAGREEN = "seagreen"
    FLAGBLUE = "flagblue"
    LIQUID = "liquid"
    DIAMANTE = "diamante"
    GRAYSCALE = "grayscale"


class OutputFormat(str, Enum):
    """Output encodings supported by the engine"""
    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"

    @property
    def content_type(self) -> str:
        return f"image/{self.value}"


# ============================================
# Operation Models
# ============================================

class _Schema(BaseModel):
    # Unknown keys are dropped so that newer tokens still decode
    model_config = ConfigDict(extra="ignore", frozen=True)


class Resize(_Schema):
    """Rescale to an exact width/height"""
    type: Literal["resize"] = "resize"
    width: int = Field(0, ge=0)
    height: int = Field(0, ge=0)
    filter: SampleFilter = SampleFilter.NEAREST


class Watermark(_Schema):
    """Composite the watermark overlay with its top-left corner at (x, y)"""
    type: Literal["watermark"] = "watermark"
    x: int = Field(0, ge=0)
    y: int = Field(0, ge=0)


class ColorFilter(_Schema):
    """Apply a named color filter"""
    type: Literal["filter"] = "filter"
    name: ColorFilterName


Operation = Annotated[
    Union[Resize, Watermark, ColorFilter],
    Field(discriminator="type"),
]


class ImageSpec(_Schema):
    """
    Versioned envelope around an ordered list of operations.

    An empty list is the identity transform.
    """
    v: int = 1
    specs: List[Operation] = Field(default_factory=list)
