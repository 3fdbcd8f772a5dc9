# signature/logic/signature_capture.py
from __future__ import annotations

import logging
from typing import Callable, Optional

from ..exceptions.errors import MalformedDataUrlError
from ..models.signature_change import SignatureChange
from .data_url import is_image_data_url
from .drawing_surface import DrawingSurface

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[SignatureChange], None]


class SignatureCapture:
    """
    Client signature capture on top of a DrawingSurface (no UI).

    Every change of the raster content is reported to *on_change* as a
    SignatureChange: after each completed stroke, on clear and on load. The
    component only reports emptiness; refusing an empty signature is the
    form's job.
    """

    def __init__(self, surface: DrawingSurface, on_change: ChangeCallback, *,
                 value: Optional[str] = None, disabled: bool = False) -> None:
        self._surface = surface
        self._on_change = on_change
        self._is_empty = True
        self._surface.add_end_stroke_listener(self.on_stroke_end)
        if value:
            self.load_existing(value)
        if disabled:
            self.set_enabled(False)

    @property
    def surface(self) -> DrawingSurface:
        return self._surface

    @property
    def is_empty(self) -> bool:
        return self._is_empty

    def dispose(self) -> None:
        """Detach from the surface; no more change reports after this."""
        self._surface.remove_end_stroke_listener(self.on_stroke_end)

    # -------- operations ----------------------------------------------------
    def on_stroke_end(self) -> None:
        if not self._surface.is_empty():
            self._report(SignatureChange(is_empty=False, value=self._surface.to_data_url()))
        else:
            self._report(SignatureChange.empty())

    def clear(self) -> None:
        self._surface.clear()
        self._report(SignatureChange.empty())

    def load_existing(self, serialization: Optional[str]) -> bool:
        """
        Render a stored serialization onto the surface.

        The consumer already holds a valid value, so success is not reported.
        Empty or malformed values leave the surface empty and never raise. A
        malformed value, or one that wipes existing ink, is reported as empty
        so the consumer drops it too.
        """
        if serialization and is_image_data_url(serialization):
            try:
                self._surface.from_data_url(serialization)
            except MalformedDataUrlError as ex:
                logger.info("Ignoring stored signature: %s", ex)
            else:
                self._is_empty = False
                return True

        had_ink = not self._is_empty
        self._surface.clear()
        self._is_empty = True
        if serialization or had_ink:
            self._report(SignatureChange.empty())
        return False

    def set_enabled(self, enabled: bool) -> None:
        if enabled:
            self._surface.on()
        else:
            self._surface.off()

    def resize(self, css_width: int, css_height: int, device_pixel_ratio: float = 1.0) -> None:
        """Adapt to a new widget size. The surface is cleared (see DrawingSurface.resize)."""
        was_empty = self._is_empty
        self._surface.resize(css_width, css_height, device_pixel_ratio)
        self._is_empty = True
        if not was_empty:
            self._report(SignatureChange.empty())

    def _report(self, change: SignatureChange) -> None:
        self._is_empty = change.is_empty
        self._on_change(change)
