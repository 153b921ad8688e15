"""
BarcodeScanner – camera barcode/QR reader driven by the UI event loop.

Frames are pulled from an OpenCV `VideoCapture` every ``1000 / frame_rate`` ms
through the injected scheduler (the Tk dialog passes ``widget.after`` and
``widget.after_cancel``), so no threads are involved. Each frame is handed to
the optional video target as a PIL image; the centred scan region is decoded
with pyzbar, limited to the configured symbologies.

The first successful decode stops the session and calls ``decode_callback``
once. Frames that cannot be read or decoded are skipped silently; a decoder
that is unavailable or fails ends the session through ``on_error``.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple

import cv2
import numpy as np
from PIL import Image

from ..exceptions.errors import ScannerError

_FEATURE_ID = "scanner"


class Symbology(str, Enum):
    """Barcode formats accepted by the product serial scanner."""

    QR_CODE = "QR_CODE"
    CODE_128 = "CODE_128"
    CODE_39 = "CODE_39"
    CODE_93 = "CODE_93"
    EAN_13 = "EAN_13"
    EAN_8 = "EAN_8"
    UPC_A = "UPC_A"
    UPC_E = "UPC_E"
    ITF = "ITF"
    PDF_417 = "PDF_417"

    @property
    def zbar_name(self) -> str:
        """Member name in pyzbar's ZBarSymbol enum."""
        return _ZBAR_NAMES[self]


_ZBAR_NAMES = {
    Symbology.QR_CODE: "QRCODE",
    Symbology.CODE_128: "CODE128",
    Symbology.CODE_39: "CODE39",
    Symbology.CODE_93: "CODE93",
    Symbology.EAN_13: "EAN13",
    Symbology.EAN_8: "EAN8",
    Symbology.UPC_A: "UPCA",
    Symbology.UPC_E: "UPCE",
    Symbology.ITF: "I25",
    Symbology.PDF_417: "PDF417",
}


def zbar_decode(gray: np.ndarray, symbols: Sequence[str]) -> Sequence[Any]:
    """
    Decode with pyzbar; the zbar shared library is only loaded once a camera scan runs.

    Raises:
        ScannerError: zbar library missing or the decoder itself failed.
    """
    try:
        from pyzbar.pyzbar import ZBarSymbol, decode
        from pyzbar.pyzbar_error import PyZbarError
    except ImportError as exc:
        raise ScannerError(f"Barcode decoder unavailable: {exc}") from exc
    try:
        return decode(gray, symbols=[ZBarSymbol[name] for name in symbols])
    except PyZbarError as exc:
        raise ScannerError(f"Barcode decoder failed: {exc}") from exc


def parse_formats(text: str) -> Tuple[Symbology, ...]:
    """Comma separated format names; unknown names are skipped, blank means all."""
    names = [part.strip().upper() for part in (text or "").split(",") if part.strip()]
    if not names:
        return tuple(Symbology)
    result: List[Symbology] = []
    for name in names:
        try:
            sym = Symbology(name)
        except ValueError:
            continue
        if sym not in result:
            result.append(sym)
    return tuple(result)


@dataclass
class ScanConfig:
    """
    Attributes:
        formats: symbologies to decode.
        frame_rate: frames per second pulled from the camera.
        scan_region: (width, height) of the centred decode window in pixels.
        camera_index: OpenCV device index.
        timeout_seconds: give up after this long without a decode (0 = never).
    """
    formats: Tuple[Symbology, ...] = field(default_factory=lambda: tuple(Symbology))
    frame_rate: int = 10
    scan_region: Tuple[int, int] = (280, 120)
    camera_index: int = 0
    timeout_seconds: float = 0.0

    @property
    def interval_ms(self) -> int:
        return max(1, int(1000 / max(1, self.frame_rate)))

    @classmethod
    def from_settings(cls, settings: Any) -> "ScanConfig":
        return cls(
            formats=parse_formats(getattr(settings, "formats", "")),
            frame_rate=int(getattr(settings, "frame_rate", 10)),
            scan_region=(int(getattr(settings, "region_width", 280)),
                         int(getattr(settings, "region_height", 120))),
            camera_index=int(getattr(settings, "camera_index", 0)),
            timeout_seconds=float(getattr(settings, "timeout_seconds", 0.0)),
        )


def scan_window(frame_shape: Sequence[int], region: Tuple[int, int]) -> Tuple[int, int, int, int]:
    """(x0, y0, x1, y1) of the region centred in a frame, clipped to the frame."""
    h, w = int(frame_shape[0]), int(frame_shape[1])
    rw, rh = min(region[0], w), min(region[1], h)
    x0, y0 = (w - rw) // 2, (h - rh) // 2
    return x0, y0, x0 + rw, y0 + rh


class BarcodeScanner:
    """
    One camera scan session at a time.

    Args:
        schedule: ``schedule(delay_ms, callback) -> handle`` (e.g. ``widget.after``).
        cancel: ``cancel(handle)`` (e.g. ``widget.after_cancel``).
        capture_factory: opens a camera by index; defaults to ``cv2.VideoCapture``.
        decoder: ``decoder(gray_image, symbols=[zbar names]) -> results``;
            defaults to `zbar_decode`.
        clock: monotonic seconds, used for the timeout.
        logger: event logger (feature "scanner").
    """

    def __init__(
        self,
        schedule: Callable[[int, Callable[[], None]], Any],
        cancel: Callable[[Any], None],
        *,
        capture_factory: Optional[Callable[[int], Any]] = None,
        decoder: Optional[Callable[..., Sequence[Any]]] = None,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[Any] = None,
    ) -> None:
        self._schedule = schedule
        self._cancel = cancel
        self._capture_factory = capture_factory or cv2.VideoCapture
        self._decoder = decoder or zbar_decode
        self._clock = clock
        self._logger = logger

        self._capture: Any = None
        self._handle: Any = None
        self._config = ScanConfig()
        self._video_target: Optional[Callable[[Image.Image], None]] = None
        self._on_decode: Optional[Callable[[str], None]] = None
        self._on_error: Optional[Callable[[ScannerError], None]] = None
        self._started_at = 0.0
        self._skipped_frames = 0

    @property
    def is_scanning(self) -> bool:
        return self._capture is not None

    # --- Public API ---------------------------------------------------------

    def start(
        self,
        video_target: Optional[Callable[[Image.Image], None]],
        decode_callback: Callable[[str], None],
        config: Optional[ScanConfig] = None,
        on_error: Optional[Callable[[ScannerError], None]] = None,
    ) -> None:
        """
        Open the camera and begin polling frames.

        Raises:
            ScannerError: camera missing, busy or permission denied.
        """
        if self.is_scanning:
            self.stop()
        config = config or ScanConfig()
        if not config.formats:
            raise ScannerError("No barcode formats configured")

        capture = self._capture_factory(config.camera_index)
        if capture is None or not capture.isOpened():
            if capture is not None:
                capture.release()
            message = f"Cannot open camera device {config.camera_index}"
            self._log("camera_unavailable", message, level="ERROR")
            raise ScannerError(message)

        self._capture = capture
        self._config = config
        self._video_target = video_target
        self._on_decode = decode_callback
        self._on_error = on_error
        self._started_at = self._clock()
        self._skipped_frames = 0
        self._log("scan_started", f"camera {config.camera_index} @ {config.frame_rate} fps")
        self._handle = self._schedule(config.interval_ms, self._tick)

    def stop(self) -> None:
        """Release the camera; safe to call repeatedly."""
        if self._handle is not None:
            self._cancel(self._handle)
            self._handle = None
        capture, self._capture = self._capture, None
        if capture is None:
            return
        capture.release()
        if self._skipped_frames:
            self._log("frames_skipped", f"{self._skipped_frames} frame(s) could not be read or decoded",
                      level="WARNING")
        self._log("scan_stopped")

    # --- Frame loop ---------------------------------------------------------

    def _tick(self) -> None:
        self._handle = None
        if not self.is_scanning:
            return

        try:
            text = self._read_frame()
        except (ScannerError, ImportError) as exc:
            err = exc if isinstance(exc, ScannerError) else ScannerError(f"Barcode decoder unavailable: {exc}")
            self._abort("scan_failed", err, level="ERROR")
            return
        if text:
            callback = self._on_decode
            self.stop()
            self._log("decoded", text)
            if callback is not None:
                callback(text)
            return

        timeout = self._config.timeout_seconds
        if timeout > 0 and self._clock() - self._started_at >= timeout:
            err = ScannerError(f"No barcode detected within {timeout:g} seconds")
            self._abort("scan_timeout", err, level="WARNING")
            return

        self._handle = self._schedule(self._config.interval_ms, self._tick)

    def _abort(self, event: str, err: ScannerError, *, level: str) -> None:
        on_error = self._on_error
        self.stop()
        self._log(event, str(err), level=level)
        if on_error is not None:
            on_error(err)

    def _read_frame(self) -> Optional[str]:
        ok, frame = self._capture.read()
        if not ok or frame is None:
            self._skipped_frames += 1
            return None
        try:
            if self._video_target is not None:
                self._video_target(Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)))
            x0, y0, x1, y1 = scan_window(frame.shape, self._config.scan_region)
            region = np.ascontiguousarray(frame[y0:y1, x0:x1])
            gray = cv2.cvtColor(region, cv2.COLOR_BGR2GRAY) if region.ndim == 3 else region
            results = self._decoder(gray, symbols=[s.zbar_name for s in self._config.formats])
        except (cv2.error, ValueError, TypeError):
            self._skipped_frames += 1
            return None

        for result in results or []:
            data = getattr(result, "data", b"")
            text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else str(data)
            text = text.strip()
            if text:
                return text
        return None

    def _log(self, event: str, message: Optional[str] = None, *, level: str = "INFO") -> None:
        logger = self._logger
        if logger is None:
            from core.logging.logic.logger import get_logger
            logger = get_logger()
        logger.log(_FEATURE_ID, event, level=level, message=message)
