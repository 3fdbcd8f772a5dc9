from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class SignatureChange:
    """What the capture reports upward after every change: emptiness + value."""
    is_empty: bool
    value: str = ""

    @classmethod
    def empty(cls) -> "SignatureChange":
        return cls(is_empty=True, value="")
