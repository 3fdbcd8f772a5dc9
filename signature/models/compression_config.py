from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class CompressionConfig:
    """
    Target box and JPEG quality for the signature sent to the backend.
    Defaults match what the generated installation PDF expects (400x200 @ 0.7).
    """
    max_width: int = 400
    max_height: int = 200
    quality: float = 0.7

    def __post_init__(self) -> None:
        if self.max_width <= 0 or self.max_height <= 0:
            raise ValueError("max_width and max_height must be positive.")
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError("quality must be within [0, 1].")

    @property
    def jpeg_quality(self) -> int:
        """Pillow's JPEG scale (1..95) for the 0..1 quality."""
        return max(1, min(95, int(round(self.quality * 100))))
