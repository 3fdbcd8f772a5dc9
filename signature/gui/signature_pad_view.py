# signature/gui/signature_pad_view.py
from __future__ import annotations
import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional

from PIL import ImageTk

from ..logic.signature_capture import SignatureCapture
from ..logic.signature_service import SignatureService
from ..models.signature_change import SignatureChange


class SignaturePadView(ttk.Frame):
    """
    Client signature block of the installation form.

    The Tk canvas only mirrors what the user draws; the ink itself lives in the
    SignatureCapture/DrawingSurface, which produces the value reported to
    *on_signature_change* ("" while empty).
    """
    CANVAS_W = 640
    CANVAS_H = 224

    def __init__(self, parent: tk.Misc, *, service: SignatureService,
                 on_signature_change: Callable[[str], None],
                 value: Optional[str] = None, disabled: bool = False) -> None:
        super().__init__(parent)
        self._on_signature_change = on_signature_change
        self._disabled = disabled
        self._line: Optional[int] = None
        self._points: list[float] = []
        self._photo: Optional[ImageTk.PhotoImage] = None

        ttk.Label(self, text="Signature du client", font=("TkDefaultFont", 12, "bold")).grid(
            row=0, column=0, columnspan=2, sticky="w")
        ttk.Label(self, text="Signature obligatoire pour valider l'installation").grid(
            row=1, column=0, columnspan=2, sticky="w", pady=(0, 6))

        self.canvas = tk.Canvas(
            self, width=self.CANVAS_W, height=self.CANVAS_H, bg="white", cursor="crosshair",
            highlightthickness=0, borderwidth=0
        )
        self.canvas.grid(row=2, column=0, columnspan=2, sticky="w")
        self.columnconfigure(0, weight=1)

        self._status = ttk.Label(self)
        self._status.grid(row=3, column=0, sticky="w", pady=(6, 0))
        self._clear_btn = ttk.Button(self, text="Effacer", command=self.clear)
        self._clear_btn.grid(row=3, column=1, sticky="e", pady=(6, 0))

        self._capture: SignatureCapture = service.create_capture(
            self.CANVAS_W, self.CANVAS_H, self._handle_change,
            value=value, disabled=disabled, device_pixel_ratio=self._device_pixel_ratio(),
        )
        if not self._capture.is_empty:
            self._show_surface_image()

        self.canvas.bind("<ButtonPress-1>", self._on_down)
        self.canvas.bind("<B1-Motion>", self._on_move)
        self.canvas.bind("<ButtonRelease-1>", self._on_up)
        self.canvas.bind("<Configure>", self._on_configure)
        self._refresh_state()

    # -------- public --------------------------------------------------------
    @property
    def is_empty(self) -> bool:
        return self._capture.is_empty

    def clear(self) -> None:
        self.canvas.delete("all")
        self._capture.clear()

    def set_disabled(self, disabled: bool) -> None:
        self._disabled = disabled
        self._capture.set_enabled(not disabled)
        self._refresh_state()

    def destroy(self) -> None:
        self._capture.dispose()
        super().destroy()

    # -------- canvas handlers -----------------------------------------------
    def _on_down(self, e) -> None:
        if not self._capture.surface.pointer_down(e.x, e.y):
            return
        self._points = [e.x, e.y]
        self._line = self.canvas.create_line(
            e.x, e.y, e.x + 1, e.y + 1, fill="black", width=3,
            capstyle="round", joinstyle="round", smooth=True, splinesteps=24,
        )

    def _on_move(self, e) -> None:
        if self._line is None:
            return
        if self._capture.surface.pointer_move(e.x, e.y):
            self._points.extend((e.x, e.y))
            self.canvas.coords(self._line, *self._points)

    def _on_up(self, e) -> None:
        if self._line is None:
            return
        self._line = None
        self._points = []
        self._capture.surface.pointer_up(e.x, e.y)

    def _on_configure(self, e) -> None:
        if (e.width, e.height) == self._capture.surface.css_size or e.width <= 1 or e.height <= 1:
            return
        # new size at the current pixel density; the ink is lost
        self.canvas.delete("all")
        self._capture.resize(e.width, e.height, self._device_pixel_ratio())
        self._refresh_state()

    # -------- helpers -------------------------------------------------------
    def _handle_change(self, change: SignatureChange) -> None:
        self._on_signature_change(change.value)
        self._refresh_state()

    def _show_surface_image(self) -> None:
        img = self._capture.surface.to_image().resize(self._capture.surface.css_size)
        self._photo = ImageTk.PhotoImage(img)
        self.canvas.delete("all")
        self.canvas.create_image(0, 0, image=self._photo, anchor="nw")

    def _device_pixel_ratio(self) -> float:
        try:
            return max(float(self.winfo_fpixels("1i")) / 96.0, 1.0)
        except tk.TclError:
            return 1.0

    def _refresh_state(self) -> None:
        if not hasattr(self, "_capture"):
            return
        if self._capture.is_empty:
            self._status.config(text="Veuillez signer dans la zone ci-dessus", foreground="#c2410c")
        else:
            self._status.config(text="Signature capturée avec succès", foreground="#15803d")
        state = "disabled" if (self._disabled or self._capture.is_empty) else "normal"
        self._clear_btn.config(state=state)
