"""
===============================================================================
PrintService – hand the on-screen service log sheet to the OS print facility
-------------------------------------------------------------------------------
Steps
    1) Grab the widget's screen area (PIL.ImageGrab).
    2) Save it as PNG in the temp folder.
    3) Send to printer (platform-specific); fall back to opening a viewer so
       the user can print manually.

No layout engine here: what is on screen is what gets printed.
===============================================================================
"""
from __future__ import annotations

import os
import subprocess
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from PIL import ImageGrab

from ..exceptions.errors import PrintError

_FEATURE_ID = "print"


class PrintService:
    """
    Args:
        grab: ``grab(bbox) -> PIL.Image``; defaults to ``ImageGrab.grab``.
        launcher: starts an external command; defaults to ``subprocess.Popen``.
        platform: ``sys.platform`` value used to pick the print command.
        target_dir: where snapshots are written.
        logger: event logger (feature "print").
    """

    def __init__(
        self,
        *,
        grab: Optional[Callable[..., Any]] = None,
        launcher: Optional[Callable[[Sequence[str]], Any]] = None,
        platform: Optional[str] = None,
        target_dir: Optional[Path] = None,
        logger: Optional[Any] = None,
    ) -> None:
        self._grab = grab or ImageGrab.grab
        self._launch = launcher or subprocess.Popen
        self._platform = platform or sys.platform
        self._target_dir = target_dir or Path(tempfile.gettempdir()) / "servicelog_print"
        self._logger = logger

    # ---------- public -------------------------------------------------------
    def render_current_view(self, widget: Any, *, reference_id: Optional[str] = None) -> None:
        """
        Print what `widget` currently shows.

        Raises:
            PrintError: the screen could not be captured or no print/viewer
                command could be started.
        """
        path = self.snapshot(widget)
        self._send_to_printer(path)
        self._log("printed", reference_id=reference_id, message=str(path))

    def snapshot(self, widget: Any) -> Path:
        """Save the widget's on-screen pixels as PNG and return the file path."""
        try:
            widget.update_idletasks()
            x, y = widget.winfo_rootx(), widget.winfo_rooty()
            w, h = widget.winfo_width(), widget.winfo_height()
            if w <= 1 or h <= 1:
                raise PrintError("Nothing to print: the view is not visible")
            image = self._grab(bbox=(x, y, x + w, y + h))
            self._target_dir.mkdir(parents=True, exist_ok=True)
            path = self._target_dir / f"service_log_{datetime.now():%Y%m%d_%H%M%S_%f}.png"
            image.save(path, format="PNG")
        except PrintError as exc:
            self._log("print_failed", level="ERROR", message=str(exc))
            raise
        except OSError as exc:
            self._log("print_failed", level="ERROR", message=f"capture failed: {exc}")
            raise PrintError(f"Could not capture the view: {exc}") from exc
        return path

    # ---------- helpers ------------------------------------------------------
    def _send_to_printer(self, path: Path) -> None:
        try:
            if self._platform.startswith("win"):
                os.startfile(str(path), "print")  # type: ignore[attr-defined]
            else:
                self._launch(["lp", str(path)])
            return
        except OSError as exc:
            self._log("print_command_failed", level="WARNING", message=str(exc))

        # fallback: open in viewer so the user can print manually
        try:
            if self._platform.startswith("win"):
                os.startfile(str(path))  # type: ignore[attr-defined]
            elif self._platform == "darwin":
                self._launch(["open", str(path)])
            else:
                self._launch(["xdg-open", str(path)])
        except OSError as exc:
            self._log("print_failed", level="ERROR", message=str(exc))
            raise PrintError(f"No print command available: {exc}") from exc

    def _log(self, event: str, *, level: str = "INFO", reference_id: Optional[str] = None,
             message: Optional[str] = None) -> None:
        logger = self._logger
        if logger is None:
            from core.logging.logic.logger import get_logger
            logger = get_logger()
        logger.log(_FEATURE_ID, event, level=level, reference_id=reference_id, message=message)
