# signature/logic/data_url.py
"""
Helpers around the signature serialization: ``data:<mime>;base64,<payload>``.

The same string is the wire format of the completion call and the resumable
representation stored in form drafts.
"""
from __future__ import annotations

import base64
import binascii
import math
from dataclasses import dataclass

from ..exceptions.errors import MalformedDataUrlError

_PREFIX = "data:"
_B64_MARKER = ";base64"
_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


@dataclass(frozen=True)
class DataUrl:
    mime: str
    payload: bytes


def encode_data_url(data: bytes, mime: str) -> str:
    return f"{_PREFIX}{mime}{_B64_MARKER},{base64.b64encode(data).decode('ascii')}"


def is_image_data_url(value: object) -> bool:
    """Cheap prefix check; does not decode the payload."""
    return isinstance(value, str) and value.startswith("data:image")


def decode_data_url(value: str) -> DataUrl:
    """
    Split and decode an image data URL.

    Raises MalformedDataUrlError for anything other than
    ``data:image/<subtype>;base64,<non-empty valid base64>``.
    """
    if not is_image_data_url(value):
        raise MalformedDataUrlError("Not an image data URL.")
    header, sep, b64 = value.partition(",")
    if not sep or not header.endswith(_B64_MARKER):
        raise MalformedDataUrlError("Data URL is not base64 encoded.")
    mime = header[len(_PREFIX):-len(_B64_MARKER)]
    if "/" not in mime:
        raise MalformedDataUrlError(f"Invalid MIME type '{mime}'.")
    try:
        payload = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as ex:
        raise MalformedDataUrlError(f"Invalid base64 payload: {ex}") from ex
    if not payload:
        raise MalformedDataUrlError("Empty payload.")
    return DataUrl(mime=mime, payload=payload)


def get_data_url_size(value: str) -> int:
    """Approximate size in bytes of the base64 payload of *value*."""
    parts = value.split(",")
    b64 = parts[1] if len(parts) > 1 else ""
    return round(len(b64) * 3 / 4)


def format_bytes(size: int) -> str:
    """Human-readable size, e.g. "0 Bytes", "1.5 KB", "3.41 MB"."""
    if size == 0:
        return "0 Bytes"
    k = 1024
    i = min(int(math.floor(math.log(size) / math.log(k))), len(_SIZE_UNITS) - 1)
    value = round(size / k ** i, 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[i]}"
