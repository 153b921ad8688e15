# signature/gui/signature_pad.py
from __future__ import annotations
import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional

from PIL import ImageTk

from ..logic.signature_surface import SignatureSurface
from ..models.pointer_event import PointerEvent
from ..models.signature_config import SignatureConfig
from ..models.signature_image import SignatureImage


class SignaturePad(ttk.Frame):
    """
    Signature field for forms: a Tk canvas that stretches with its container
    and mirrors a SignatureSurface.

    - <Configure> on the canvas is the resize notification; the first one with
      a nonzero size allocates the bitmap.
    - Mouse button 1 press/drag/release become pointer events in canvas
      coordinates, so strokes land exactly under the cursor.
    - After each stroke `on_end` is called so the form can store the export.
    """

    def __init__(
        self,
        parent: tk.Misc,
        *,
        config: Optional[SignatureConfig] = None,
        name: str = "signature",
        on_end: Optional[Callable[[], None]] = None,
        height: int = 120,
    ) -> None:
        super().__init__(parent)
        self._photo: Optional[ImageTk.PhotoImage] = None
        self._image_item: Optional[int] = None

        self.surface = SignatureSurface(
            config=config,
            scheduler=self.after_idle,
            name=name,
            on_end=on_end,
        )
        self.surface.add_change_listener(self._on_surface_changed)

        self.columnconfigure(0, weight=1)
        self.rowconfigure(0, weight=1)
        self.canvas = tk.Canvas(
            self, height=height, bg="white", cursor="crosshair",
            highlightthickness=1, highlightbackground="#888"
        )
        self.canvas.grid(row=0, column=0, sticky="nsew")

        self.canvas.bind("<Configure>", self._on_configure)
        self.canvas.bind("<ButtonPress-1>", self._on_down)
        self.canvas.bind("<B1-Motion>", self._on_move)
        self.canvas.bind("<ButtonRelease-1>", self._on_up)
        self.bind("<Destroy>", self._on_destroy)

    # --- Public API -----------------------------------------------------------

    def is_empty(self) -> bool:
        return self.surface.is_empty()

    def clear(self) -> None:
        self.surface.clear()

    def export(self) -> SignatureImage:
        return self.surface.export()

    def load(self, image: SignatureImage) -> None:
        """Show a stored signature stretched to the pad (applied once the pad has a size)."""
        self.surface.clear()
        self.surface.import_image(image, no_scale=False)

    # --- Canvas handlers ------------------------------------------------------

    def _on_configure(self, e) -> None:
        # highlight border is part of the widget, not of the drawable area
        border = int(self.canvas.cget("highlightthickness"))
        w, h = e.width - 2 * border, e.height - 2 * border
        if self.surface.size is None:
            self.surface.begin((w, h))
        else:
            self.surface.on_resize((w, h))

    def _on_down(self, e) -> None:
        self.surface.draw([PointerEvent.down(*self._local(e))])

    def _on_move(self, e) -> None:
        self.surface.draw([PointerEvent.move(*self._local(e))])

    def _on_up(self, e) -> None:
        self.surface.draw([PointerEvent.up(*self._local(e))])

    def _on_destroy(self, e) -> None:
        if e.widget is self:
            self.surface.dispose()

    # --- Rendering ------------------------------------------------------------

    def _local(self, e) -> tuple[float, float]:
        border = int(self.canvas.cget("highlightthickness"))
        return (self.canvas.canvasx(e.x) - border, self.canvas.canvasy(e.y) - border)

    def _on_surface_changed(self) -> None:
        img = self.surface.image
        if img is None:
            return
        border = int(self.canvas.cget("highlightthickness"))
        self._photo = ImageTk.PhotoImage(img)
        if self._image_item is None:
            self._image_item = self.canvas.create_image(border, border, anchor="nw", image=self._photo)
        else:
            self.canvas.itemconfigure(self._image_item, image=self._photo)
        if not self.surface.is_restoring:
            self._resync_size()

    def _resync_size(self) -> None:
        # a resize dropped while a restore was in flight is caught up here
        border = int(self.canvas.cget("highlightthickness"))
        w = self.canvas.winfo_width() - 2 * border
        h = self.canvas.winfo_height() - 2 * border
        size = self.surface.size
        if size is not None and w > 1 and h > 1 and (w, h) != size.as_tuple():
            self.after_idle(lambda: self.surface.on_resize((w, h)))
