"""Camera overlay that scans a product serial from a barcode or QR code."""
from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
from typing import Callable, Optional

from PIL import Image, ImageTk

from servicelog.exceptions.errors import ScannerError
from servicelog.logic.barcode_scanner import BarcodeScanner, ScanConfig, scan_window


class ScanDialog(tk.Toplevel):
    """
    Modal camera preview. The scan region is outlined on the preview; the
    dialog closes itself after the first decode and passes the text on.
    Camera problems close the dialog with a message; manual entry stays possible.
    """

    PREVIEW_WIDTH = 480

    def __init__(
        self,
        parent: tk.Misc,
        *,
        config: ScanConfig,
        on_decoded: Callable[[str], None],
        scanner: Optional[BarcodeScanner] = None,
    ) -> None:
        super().__init__(parent)
        self.title("Scan QR Code / Barcode")
        self.transient(parent.winfo_toplevel())
        self.resizable(False, False)
        self._config = config
        self._on_decoded = on_decoded
        self._photo: Optional[ImageTk.PhotoImage] = None
        self._image_item: Optional[int] = None
        self._region_item: Optional[int] = None

        self.canvas = tk.Canvas(self, width=self.PREVIEW_WIDTH, height=360, bg="black", highlightthickness=0)
        self.canvas.pack(padx=10, pady=10)
        ttk.Label(self, text="Hold the barcode inside the frame").pack()
        ttk.Button(self, text="Cancel", command=self.close).pack(pady=(5, 10))
        self.protocol("WM_DELETE_WINDOW", self.close)

        self.scanner = scanner or BarcodeScanner(self.after, self.after_cancel)
        try:
            self.scanner.start(self._show_frame, self._decoded, config, on_error=self._failed)
        except ScannerError as exc:
            messagebox.showerror("Scanner", str(exc), parent=parent)
            self.after_idle(self.destroy)
            return
        self.grab_set()

    def close(self) -> None:
        self.scanner.stop()
        self.destroy()

    # ------------------------------------------------------------

    def _show_frame(self, frame: Image.Image) -> None:
        scale = self.PREVIEW_WIDTH / frame.width
        preview = frame.resize((self.PREVIEW_WIDTH, max(1, int(frame.height * scale))))
        self._photo = ImageTk.PhotoImage(preview)
        if self._image_item is None:
            self.canvas.configure(height=preview.height)
            self._image_item = self.canvas.create_image(0, 0, anchor="nw", image=self._photo)
        else:
            self.canvas.itemconfigure(self._image_item, image=self._photo)

        x0, y0, x1, y1 = (int(v * scale) for v in scan_window((frame.height, frame.width), self._config.scan_region))
        if self._region_item is None:
            self._region_item = self.canvas.create_rectangle(x0, y0, x1, y1, outline="#00ff00", width=2)
        else:
            self.canvas.coords(self._region_item, x0, y0, x1, y1)
            self.canvas.tag_raise(self._region_item)

    def _decoded(self, text: str) -> None:
        self.destroy()
        self._on_decoded(text)

    def _failed(self, error: ScannerError) -> None:
        parent = self.master
        self.destroy()
        messagebox.showwarning("Scanner", str(error), parent=parent)
