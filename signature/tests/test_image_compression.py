"""Signature downscale + JPEG recompression."""
from __future__ import annotations

import asyncio

import pytest

from signature.logic.data_url import decode_data_url
from signature.logic.drawing_surface import DrawingSurface
from signature.logic.image_compression import (
    compress_image,
    compress_image_sync,
    compress_with_config,
    fit_within,
)
from signature.logic.signature_capture import SignatureCapture
from signature.models.compression_config import CompressionConfig

from ._images import open_data_url, png_data_url


@pytest.mark.parametrize("size, box, expected", [
    ((1600, 800), (400, 200), (400, 200)),
    ((300, 100), (400, 200), (300, 100)),
    ((1000, 300), (400, 200), (400, 120)),
    ((300, 900), (400, 200), (67, 200)),
    ((5000, 1), (400, 200), (400, 1)),
])
def test_fit_within(size, box, expected) -> None:
    assert fit_within(*size, *box) == expected


def test_wide_signature_is_scaled_to_box() -> None:
    result = asyncio.run(compress_image(png_data_url(1600, 800), 400, 200, 0.7))
    assert decode_data_url(result).mime == "image/jpeg"
    img = open_data_url(result)
    assert img.format == "JPEG"
    assert img.size == (400, 200)
    assert img.mode == "RGB"


def test_transparent_background_becomes_white() -> None:
    result = asyncio.run(compress_image(png_data_url(1600, 800, transparent=True)))
    img = open_data_url(result)
    assert "A" not in img.getbands()
    corner = img.getpixel((2, 2))
    assert all(channel >= 245 for channel in corner)
    ink = img.getpixel((200, 100))
    assert all(channel <= 60 for channel in ink)


def test_small_image_is_not_upscaled() -> None:
    result = asyncio.run(compress_image(png_data_url(300, 100), 400, 200, 0.7))
    assert open_data_url(result).size == (300, 100)


@pytest.mark.parametrize("value", [
    "definitely not a data url",
    "data:image/png;base64,@@@",
    "data:image/png;base64,aGVsbG8=",
])
def test_invalid_input_is_returned_unchanged(value: str) -> None:
    assert asyncio.run(compress_image(value, 400, 200, 0.7)) == value


def test_invalid_settings_fall_back_to_original() -> None:
    original = png_data_url(100, 50)
    assert compress_image_sync(original, quality=1.5) == original


def test_lower_quality_gives_smaller_payload() -> None:
    original = png_data_url(800, 400)
    low = compress_image_sync(original, quality=0.1)
    high = compress_image_sync(original, quality=0.95)
    assert len(low) < len(high)


def test_compress_with_config() -> None:
    config = CompressionConfig(max_width=200, max_height=100, quality=0.5)
    result = asyncio.run(compress_with_config(png_data_url(1600, 800), config))
    assert open_data_url(result).size == (200, 100)


def test_reload_of_compressed_signature_keeps_box_and_aspect() -> None:
    original = png_data_url(1000, 300)
    compressed = asyncio.run(compress_image(original, 400, 200, 0.7))

    capture = SignatureCapture(DrawingSurface(640, 224), lambda change: None)
    assert capture.load_existing(compressed)
    width, height = open_data_url(capture.surface.to_data_url()).size
    assert width <= 400 and height <= 200
    assert abs(width / height - 1000 / 300) < 0.05


def test_compression_config_validation() -> None:
    with pytest.raises(ValueError):
        CompressionConfig(max_width=0)
    with pytest.raises(ValueError):
        CompressionConfig(quality=-0.1)
    assert CompressionConfig(quality=0.7).jpeg_quality == 70
    assert CompressionConfig(quality=1.0).jpeg_quality == 95
    assert CompressionConfig(quality=0.0).jpeg_quality == 1
