"""Small image factories shared by the signature tests."""
from __future__ import annotations

import io

from PIL import Image, ImageDraw

from signature.logic.data_url import decode_data_url, encode_data_url


def png_data_url(width: int, height: int, *, transparent: bool = False) -> str:
    """A PNG with a diagonal black line; background white or fully transparent."""
    if transparent:
        img = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    else:
        img = Image.new("RGB", (width, height), (255, 255, 255))
    draw = ImageDraw.Draw(img)
    draw.line((0, height // 2, width - 1, height // 2), fill=(0, 0, 0, 255) if transparent else (0, 0, 0),
              width=max(2, height // 20))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return encode_data_url(buf.getvalue(), "image/png")


def open_data_url(value: str) -> Image.Image:
    img = Image.open(io.BytesIO(decode_data_url(value).payload))
    img.load()
    return img
