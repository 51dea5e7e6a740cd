"""
Spec Codec

Encodes an ordered list of operations into a compact, URL-path-safe token and back.

Token layout:
    urlsafe-base64 (no padding) of the JSON form of ImageSpec, e.g.
    {"v":1,"specs":[{"type":"resize","width":500,"height":800,"filter":"catmullrom"}]}

Field order follows the model declarations, so the same list always yields
the same token.
"""

import base64
import binascii
import logging
from typing import List, Sequence
from urllib.parse import quote

from pydantic import ValidationError

from .errors import MalformedSpec
from .models import ImageSpec, Operation

logger = logging.getLogger(__name__)

SPEC_VERSION = 1


def encode(specs: Sequence[Operation]) -> str:
    """Encode operations into a spec token."""
    raw = ImageSpec(v=SPEC_VERSION, specs=list(specs)).model_dump_json()
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")


def decode(token: str) -> List[Operation]:
    """
    Decode a spec token into its operations.

    Raises:
        MalformedSpec: the token is not valid base64, JSON, or does not match the schema.
    """
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedSpec(f"Spec token is not valid base64: {e}") from e

    try:
        spec = ImageSpec.model_validate_json(raw)
    except ValidationError as e:
        logger.debug(f"[SpecCodec] Rejected token {token[:40]}: {e.error_count()} errors")
        raise MalformedSpec(f"Spec token does not match schema: {e.errors()[0]['msg']}") from e

    if spec.v > SPEC_VERSION:
        raise MalformedSpec(f"Unsupported spec version: {spec.v}")

    return list(spec.specs)


def build_image_path(specs: Sequence[Operation], source_url: str) -> str:
    """Build the request path for transforming `source_url` with `specs`."""
    return f"/image/{encode(specs)}/{quote(source_url, safe='')}"
