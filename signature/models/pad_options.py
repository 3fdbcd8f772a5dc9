# signature/models/pad_options.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class PadOptions:
    """
    Pen and background of the drawing surface (widths in CSS pixels).

    Stroke width follows pointer speed: max_width / (velocity + 1), never
    below min_width, so slow strokes come out thicker.
    """
    pen_color: RGB = (0, 0, 0)
    background_color: RGB = (255, 255, 255)
    min_width: float = 2.0
    max_width: float = 4.0
    # weight of the newest velocity sample (0..1)
    velocity_filter_weight: float = 0.7
    # ignore moves closer than this to the previous point
    min_distance: float = 5.0

    @property
    def dot_size(self) -> float:
        return (self.min_width + self.max_width) / 2
