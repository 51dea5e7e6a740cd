"""
Spec codec tests

运行测试：
    cd backend
    pytest tests/test_spec_codec.py -v
"""

import base64
import json

import pytest

from thumbnail_proxy.errors import MalformedSpec
from thumbnail_proxy.models import (
    ColorFilter, ColorFilterName, Resize, SampleFilter, Watermark,
)
from thumbnail_proxy.spec_codec import build_image_path, decode, encode


def raw_token(payload):
    """Encode an arbitrary JSON payload the way the codec does."""
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


# ============================================
# 1. Round trip
# ============================================

class TestRoundTrip:
    """encode/decode 往返测试"""

    @pytest.mark.parametrize("specs", [
        [],
        [Resize(width=500, height=800, filter=SampleFilter.CATMULL_ROM)],
        [Watermark(x=20, y=20), ColorFilter(name=ColorFilterName.MARINE)],
        [
            Resize(width=1, height=2, filter=SampleFilter.LANCZOS3),
            Resize(width=0, height=0, filter=SampleFilter.GAUSSIAN),
            ColorFilter(name=ColorFilterName.GRAYSCALE),
            Watermark(x=0, y=0),
        ],
    ])
    def test_decode_inverts_encode(self, specs):
        assert decode(encode(specs)) == specs

    def test_order_is_preserved(self):
        ops = [
            Resize(width=5, height=5),
            Watermark(x=1, y=2),
            ColorFilter(name=ColorFilterName.OCEANIC),
        ]
        assert decode(encode(ops)) == ops

        reordered = [ops[2], ops[0], ops[1]]
        assert decode(encode(reordered)) == reordered

    def test_encoding_is_deterministic(self):
        specs = [Resize(width=5, height=6, filter=SampleFilter.TRIANGLE), Watermark(x=3, y=4)]
        assert encode(specs) == encode(list(specs))
        assert encode(specs) == encode(decode(encode(specs)))

    def test_token_is_url_path_safe(self):
        specs = [Resize(width=65535, height=65535, filter=SampleFilter.LANCZOS3)] * 20
        token = encode(specs)
        allowed = set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")
        assert set(token) <= allowed

    def test_padded_token_is_accepted(self):
        token = encode([Watermark(x=7, y=9)])
        padded = token + "=" * (-len(token) % 4)
        assert decode(padded) == [Watermark(x=7, y=9)]


# ============================================
# 2. Forward compatibility
# ============================================

class TestForwardCompatibility:
    """缺省字段与未知字段"""

    def test_missing_fields_use_defaults(self):
        token = raw_token({"specs": [{"type": "resize", "width": 4, "height": 3}, {"type": "watermark"}]})
        assert decode(token) == [
            Resize(width=4, height=3, filter=SampleFilter.NEAREST),
            Watermark(x=0, y=0),
        ]

    def test_unknown_keys_are_ignored(self):
        token = raw_token({
            "v": 1,
            "specs": [{"type": "watermark", "x": 1, "y": 2, "opacity": 0.5}],
            "extra": True,
        })
        assert decode(token) == [Watermark(x=1, y=2)]

    def test_empty_envelope_is_identity(self):
        assert decode(raw_token({})) == []


# ============================================
# 3. Malformed tokens
# ============================================

class TestMalformedSpec:
    """非法 token 必须抛出 MalformedSpec"""

    @pytest.mark.parametrize("token", [
        "",
        "not base64!",
        "a",
        "%%%%",
        base64.urlsafe_b64encode(b"\xff\xfe\x00").decode(),
        raw_token([1, 2, 3]),
        raw_token({"specs": "resize"}),
    ])
    def test_garbage_is_rejected(self, token):
        with pytest.raises(MalformedSpec):
            decode(token)

    def test_unknown_operation_type_is_rejected(self):
        token = raw_token({"specs": [{"type": "resize", "width": 1, "height": 1}, {"type": "rotate"}]})
        with pytest.raises(MalformedSpec):
            decode(token)

    def test_unknown_filter_name_is_rejected(self):
        token = raw_token({"specs": [{"type": "filter", "name": "sepia-ish"}]})
        with pytest.raises(MalformedSpec):
            decode(token)

    def test_unknown_sample_filter_is_rejected(self):
        token = raw_token({"specs": [{"type": "resize", "width": 1, "height": 1, "filter": "cubic"}]})
        with pytest.raises(MalformedSpec):
            decode(token)

    def test_negative_numbers_are_rejected(self):
        token = raw_token({"specs": [{"type": "watermark", "x": -1, "y": 0}]})
        with pytest.raises(MalformedSpec):
            decode(token)

    def test_newer_version_is_rejected(self):
        with pytest.raises(MalformedSpec):
            decode(raw_token({"v": 2, "specs": []}))


# ============================================
# 4. Request path helper
# ============================================

def test_build_image_path_percent_encodes_source():
    path = build_image_path([], "https://example.com/a.png?w=1&h=2")
    prefix, token, source = path.split("/", 3)[1:]
    assert prefix == "image"
    assert decode(token) == []
    assert source == "https%3A%2F%2Fexample.com%2Fa.png%3Fw%3D1%26h%3D2"


def test_make_url_prints_sample_request(capsys):
    from thumbnail_proxy.make_url import main, sample_specs

    main(["https://example.com/photo.jpg", "--base", "http://localhost:3000/"])
    line = capsys.readouterr().out.strip()

    assert line.startswith("test url: http://localhost:3000/image/")
    token = line.split("/image/")[1].split("/")[0]
    assert decode(token) == sample_specs()
