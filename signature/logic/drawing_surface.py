# signature/logic/drawing_surface.py
"""
Pointer-driven drawing surface rendered with Pillow.

Coordinates arrive in CSS pixels (widget units). The backing raster has its
own pixel size; by default css size x device pixel ratio, or the size of an
image loaded with ``from_data_url``. Points are mapped proportionally, so a
loaded raster keeps its resolution while the widget keeps its layout.

The surface knows nothing about consumers beyond end-stroke listeners.
"""
from __future__ import annotations

import io
import math
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from PIL import Image, ImageDraw, UnidentifiedImageError

from ..exceptions.errors import MalformedDataUrlError
from ..models.pad_options import PadOptions
from .data_url import decode_data_url, encode_data_url

EndStrokeListener = Callable[[], None]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class _Point:
    x: float
    y: float
    t: float


class DrawingSurface:
    """In-memory canvas: strokes in, opaque raster out."""

    def __init__(self, css_width: int, css_height: int, *,
                 options: Optional[PadOptions] = None,
                 device_pixel_ratio: float = 1.0,
                 clock: Callable[[], float] = _monotonic_ms) -> None:
        self._options = options or PadOptions()
        self._clock = clock
        self._enabled = True
        self._listeners: List[EndStrokeListener] = []
        self._last: Optional[_Point] = None
        self._velocity = 0.0
        self._width = 0.0
        self._stroke_count = 0
        self._has_ink = False
        self.resize(css_width, css_height, device_pixel_ratio)

    # -------- geometry ------------------------------------------------------
    @property
    def css_size(self) -> Tuple[int, int]:
        return self._css_size

    @property
    def pixel_size(self) -> Tuple[int, int]:
        return self._image.size

    @property
    def device_pixel_ratio(self) -> float:
        return self._ratio

    def resize(self, css_width: int, css_height: int, device_pixel_ratio: float = 1.0) -> None:
        """
        Re-allocate the raster at css size x ratio (ratio clamped to >= 1).
        Redrawing a raster at a new resolution is lossy, so resizing clears the ink.
        """
        if css_width <= 0 or css_height <= 0:
            raise ValueError("Surface size must be positive.")
        self._ratio = max(float(device_pixel_ratio or 1.0), 1.0)
        self._css_size = (int(css_width), int(css_height))
        self._reset_raster((round(css_width * self._ratio), round(css_height * self._ratio)))

    def _reset_raster(self, size: Tuple[int, int]) -> None:
        self._image = Image.new("RGB", size, self._options.background_color)
        self._draw = ImageDraw.Draw(self._image)
        self._last = None
        self._stroke_count = 0
        self._has_ink = False

    def _to_pixels(self, x: float, y: float) -> Tuple[float, float]:
        sx = self._image.width / self._css_size[0]
        sy = self._image.height / self._css_size[1]
        return x * sx, y * sy

    def _pixel_scale(self) -> float:
        return (self._image.width / self._css_size[0] + self._image.height / self._css_size[1]) / 2

    # -------- state ---------------------------------------------------------
    def is_empty(self) -> bool:
        return not self._has_ink

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def is_drawing(self) -> bool:
        return self._last is not None

    @property
    def stroke_count(self) -> int:
        return self._stroke_count

    def on(self) -> None:
        self._enabled = True

    def off(self) -> None:
        """Stop taking input. A stroke in progress ends as if cancelled."""
        if self._last is not None:
            self._end_stroke()
        self._enabled = False

    def clear(self) -> None:
        self._reset_raster(self._image.size)

    # -------- listeners -----------------------------------------------------
    def add_end_stroke_listener(self, callback: EndStrokeListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_end_stroke_listener(self, callback: EndStrokeListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # -------- pointer events ------------------------------------------------
    def pointer_down(self, x: float, y: float, t: Optional[float] = None) -> bool:
        """Begin a stroke. Returns False when input is disabled."""
        if not self._enabled:
            return False
        if self._last is not None:
            # a second button press without release closes the previous stroke
            self._end_stroke()
        point = _Point(float(x), float(y), self._clock() if t is None else float(t))
        self._last = point
        self._velocity = 0.0
        self._width = (self._options.min_width + self._options.max_width) / 2
        self._draw_dot(point, self._options.dot_size)
        return True

    def pointer_move(self, x: float, y: float, t: Optional[float] = None) -> bool:
        if not self._enabled or self._last is None:
            return False
        point = _Point(float(x), float(y), self._clock() if t is None else float(t))
        dist = math.hypot(point.x - self._last.x, point.y - self._last.y)
        if dist < self._options.min_distance:
            return False
        dt = point.t - self._last.t
        raw_velocity = dist / dt if dt > 0 else 0.0
        w = self._options.velocity_filter_weight
        self._velocity = w * raw_velocity + (1 - w) * self._velocity
        new_width = max(self._options.max_width / (self._velocity + 1), self._options.min_width)
        self._draw_segment(self._last, point, (self._width + new_width) / 2)
        self._width = new_width
        self._last = point
        return True

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None,
                   t: Optional[float] = None) -> bool:
        if not self._enabled or self._last is None:
            return False
        if x is not None and y is not None:
            self.pointer_move(x, y, t)
        self._end_stroke()
        return True

    def pointer_cancel(self) -> bool:
        if not self._enabled or self._last is None:
            return False
        self._end_stroke()
        return True

    def _end_stroke(self) -> None:
        self._last = None
        self._stroke_count += 1
        for callback in list(self._listeners):
            callback()

    # -------- rendering -----------------------------------------------------
    def _draw_dot(self, p: _Point, width: float) -> None:
        px, py = self._to_pixels(p.x, p.y)
        r = max(width * self._pixel_scale() / 2, 0.5)
        self._draw.ellipse((px - r, py - r, px + r, py + r), fill=self._options.pen_color)
        self._has_ink = True

    def _draw_segment(self, a: _Point, b: _Point, width: float) -> None:
        ax, ay = self._to_pixels(a.x, a.y)
        bx, by = self._to_pixels(b.x, b.y)
        px_width = width * self._pixel_scale()
        self._draw.line((ax, ay, bx, by), fill=self._options.pen_color,
                        width=max(1, int(round(px_width))))
        # round joint so consecutive segments don't show gaps
        r = px_width / 2
        self._draw.ellipse((bx - r, by - r, bx + r, by + r), fill=self._options.pen_color)
        self._has_ink = True

    # -------- import / export -----------------------------------------------
    def to_image(self) -> Image.Image:
        """Independent copy of the raster."""
        return self._image.copy()

    def to_data_url(self, mime: str = "image/png") -> str:
        fmt = {"image/png": "PNG", "image/jpeg": "JPEG"}.get(mime)
        if fmt is None:
            raise ValueError(f"Unsupported export type '{mime}'.")
        buf = io.BytesIO()
        self._image.save(buf, format=fmt)
        return encode_data_url(buf.getvalue(), mime)

    def from_data_url(self, value: str) -> None:
        """
        Replace the surface content with a previously exported image.

        The raster adopts the image's pixel size; transparent areas are
        flattened onto the background. Raises MalformedDataUrlError and leaves
        the surface untouched if the value cannot be decoded.
        """
        decoded = decode_data_url(value)
        try:
            with Image.open(io.BytesIO(decoded.payload)) as src:
                src.load()
                rgba = src.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as ex:
            raise MalformedDataUrlError(f"Cannot decode image: {ex}") from ex
        if rgba.width == 0 or rgba.height == 0:
            raise MalformedDataUrlError("Image has no pixels.")

        flat = Image.new("RGB", rgba.size, self._options.background_color)
        flat.paste(rgba, mask=rgba.getchannel("A"))
        self._reset_raster(rgba.size)
        self._image.paste(flat)
        self._has_ink = True
