# signature/logic/image_compression.py
"""
Downscale + JPEG-recompress a signature data URL before upload.

Compression is a cosmetic optimization: whatever goes wrong, the caller gets
the original string back and the submission goes on.
"""
from __future__ import annotations

import asyncio
import io
import logging
from typing import Tuple

from PIL import Image

from ..models.compression_config import CompressionConfig
from .data_url import decode_data_url, encode_data_url

logger = logging.getLogger(__name__)

_WHITE = (255, 255, 255)


def fit_within(width: float, height: float, max_width: float, max_height: float) -> Tuple[int, int]:
    """
    Shrink (never grow) width x height into the box, width first, then height.
    Returns integer pixel dimensions, at least 1x1.
    """
    if width > max_width:
        height = height * max_width / width
        width = max_width
    if height > max_height:
        width = width * max_height / height
        height = max_height
    return max(1, int(round(width))), max(1, int(round(height)))


def _compress(data_url: str, config: CompressionConfig) -> str:
    decoded = decode_data_url(data_url)
    with Image.open(io.BytesIO(decoded.payload)) as src:
        src.load()
        rgba = src.convert("RGBA")

    size = fit_within(rgba.width, rgba.height, config.max_width, config.max_height)
    if size != rgba.size:
        rgba = rgba.resize(size, Image.Resampling.LANCZOS)

    out = Image.new("RGB", size, _WHITE)
    out.paste(rgba, mask=rgba.getchannel("A"))

    buf = io.BytesIO()
    out.save(buf, format="JPEG", quality=config.jpeg_quality, optimize=True)
    return encode_data_url(buf.getvalue(), "image/jpeg")


def compress_image_sync(data_url: str, max_width: float = 400, max_height: float = 200,
                        quality: float = 0.7) -> str:
    """Blocking variant of compress_image; same fallback rules."""
    try:
        config = CompressionConfig(max_width=max_width, max_height=max_height, quality=quality)
        return _compress(data_url, config)
    except Exception as ex:  # any failure falls back to the input
        logger.warning("Signature compression failed, sending original (%s: %s)",
                       type(ex).__name__, ex)
        return data_url


async def compress_image(data_url: str, max_width: float = 400, max_height: float = 200,
                         quality: float = 0.7) -> str:
    """
    Fit *data_url* into max_width x max_height (aspect kept, never upscaled),
    flatten it onto white and re-encode as JPEG at *quality* (0..1).

    Resolves with the original *data_url* if anything fails; never raises.
    Decoding runs in a worker thread so the event loop stays responsive.
    """
    return await asyncio.to_thread(compress_image_sync, data_url, max_width, max_height, quality)


async def compress_with_config(data_url: str, config: CompressionConfig) -> str:
    return await compress_image(data_url, config.max_width, config.max_height, config.quality)
