"""Signature feature exceptions."""
from __future__ import annotations


class SignatureError(Exception):
    """Base exception for the signature feature."""


class MalformedDataUrlError(SignatureError, ValueError):
    """Raised when a string is not a decodable base64 image data URL."""
