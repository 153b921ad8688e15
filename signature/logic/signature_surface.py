# signature/logic/signature_surface.py
"""
SignatureSurface – headless freehand drawing surface bound to a resizable container.

The surface owns a Pillow RGBA bitmap whose pixel size always follows the
container's rendered size (1 bitmap pixel : 1 container pixel). Strokes are
rendered in that coordinate space, so a pointer at (x, y) paints exactly at
(x, y) of the bitmap.

Resize reconciliation keeps completed strokes in place:
    1) same size          -> nothing to do
    2) non-empty surface  -> snapshot as PNG before reallocating
    3) reallocate the bitmap at the new size (blank)
    4) re-import the snapshot 1:1 (no stretching)
    5) while that import is in flight further resize notifications are dropped;
       the guard is released by the import's completion callback.

Codec failures never escape: the surface degrades to empty and the failure is
written to the event log.

No Tk in here. The Tk widget (signature.gui.signature_pad) feeds pointer and
<Configure> events and renders `image`.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from PIL import Image, ImageDraw

from ..exceptions.errors import SignatureCodecError
from ..models.pointer_event import PointerAction, PointerEvent, StrokeSession
from ..models.signature_config import SignatureConfig
from ..models.signature_image import EMPTY_SIGNATURE, CanvasDimensions, SignatureImage
from .signature_codec import decode_png, encode_png

_FEATURE_ID = "signature"

Scheduler = Callable[[Callable[[], None]], Any]
SizeLike = Union[CanvasDimensions, Tuple[int, int]]


def _run_now(task: Callable[[], None]) -> None:
    task()


def _as_dims(size: SizeLike) -> CanvasDimensions:
    if isinstance(size, CanvasDimensions):
        return size
    w, h = size
    return CanvasDimensions(int(w), int(h))


class SignatureSurface:
    """
    Drawable bitmap with draw/clear/export/import and resize reconciliation.

    Args:
        config: pen appearance (stroke width, colour).
        scheduler: runs deferred image decodes. Defaults to running immediately;
            the Tk pad passes ``widget.after_idle`` so decoding happens on the
            next event-loop turn.
        logger: object with ``log(feature, event, *, level, reference_id, message)``.
            Defaults to the application logger (resolved lazily).
        name: reference id used in log entries (e.g. "engineer", "customer").
        on_end: called after every completed stroke (pointer-up).
    """

    def __init__(
        self,
        *,
        config: Optional[SignatureConfig] = None,
        scheduler: Optional[Scheduler] = None,
        logger: Optional[Any] = None,
        name: str = "signature",
        on_end: Optional[Callable[[], None]] = None,
    ) -> None:
        self._config = config or SignatureConfig()
        self._schedule: Scheduler = scheduler or _run_now
        self._logger = logger
        self._name = name

        self._bitmap: Optional[Image.Image] = None
        self._empty = True
        self._session: Optional[StrokeSession] = None
        self._restoring = False
        self._restore_snapshot: Optional[SignatureImage] = None
        self._generation = 0
        self._pending_import: Optional[Tuple[SignatureImage, bool, Optional[Callable[[], None]]]] = None

        self._end_listeners: List[Callable[[], None]] = []
        self._change_listeners: List[Callable[[], None]] = []
        if on_end is not None:
            self._end_listeners.append(on_end)

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    @property
    def size(self) -> Optional[CanvasDimensions]:
        if self._bitmap is None:
            return None
        return CanvasDimensions(*self._bitmap.size)

    @property
    def image(self) -> Optional[Image.Image]:
        """Copy of the current bitmap (the surface keeps exclusive ownership)."""
        return self._bitmap.copy() if self._bitmap is not None else None

    @property
    def is_restoring(self) -> bool:
        return self._restoring

    @property
    def stroke_in_progress(self) -> bool:
        return self._session is not None

    def is_empty(self) -> bool:
        return self._empty

    # ------------------------------------------------------------------ #
    # Listeners
    # ------------------------------------------------------------------ #
    def add_end_listener(self, callback: Callable[[], None]) -> None:
        self._end_listeners.append(callback)

    def add_change_listener(self, callback: Callable[[], None]) -> None:
        """Called whenever the bitmap content or size changed."""
        self._change_listeners.append(callback)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def begin(self, container_size: SizeLike) -> bool:
        """
        Allocate the bitmap for the container's current size.

        Returns False (and does nothing) while the container has no area.
        Calling it again on a live surface behaves like `on_resize`.
        """
        size = _as_dims(container_size)
        if not size.has_area:
            return False
        if self._bitmap is not None:
            self.on_resize(size)
            return True

        self._bitmap = self._blank(size)
        self._notify_change()

        if self._pending_import is not None:
            image, no_scale, on_done = self._pending_import
            self._pending_import = None
            self.import_image(image, no_scale=no_scale, on_done=on_done)
        return True

    def dispose(self) -> None:
        """Release the bitmap when the container goes away."""
        self._generation += 1
        self._bitmap = None
        self._session = None
        self._pending_import = None
        self._restoring = False
        self._restore_snapshot = None
        self._end_listeners.clear()
        self._change_listeners.clear()

    # ------------------------------------------------------------------ #
    # Drawing
    # ------------------------------------------------------------------ #
    def draw(self, pointer_events: Iterable[PointerEvent]) -> None:
        """
        Render pointer-down/move/up events as connected line segments.

        MOVE/UP without a preceding DOWN are ignored, as is anything arriving
        before the bitmap exists.
        """
        if self._bitmap is None:
            return
        changed = False
        for ev in pointer_events:
            if ev.action is PointerAction.DOWN:
                self._session = StrokeSession()
                self._session.add(ev.x, ev.y)
                self._dot(ev.x, ev.y)
                self._empty = False
                changed = True
            elif ev.action is PointerAction.MOVE:
                if self._session is None:
                    continue
                self._segment(self._session.last_point, (ev.x, ev.y))
                self._session.add(ev.x, ev.y)
                changed = True
            elif ev.action is PointerAction.UP:
                if self._session is None:
                    continue
                if self._session.last_point != (ev.x, ev.y):
                    self._segment(self._session.last_point, (ev.x, ev.y))
                    changed = True
                self._session = None
                if changed:
                    self._notify_change()
                    changed = False
                self._emit_end()
        if changed:
            self._notify_change()

    def clear(self) -> None:
        """Wipe the bitmap and discard any stroke or pending import."""
        self._generation += 1
        self._session = None
        self._pending_import = None
        self._restore_snapshot = None
        self._empty = True
        if self._bitmap is not None:
            self._bitmap = self._blank(self.size)
        self._notify_change()

    # ------------------------------------------------------------------ #
    # Export / import
    # ------------------------------------------------------------------ #
    def export(self) -> SignatureImage:
        if self._empty or self._bitmap is None:
            return EMPTY_SIGNATURE
        try:
            if self._restore_snapshot is not None:
                # the drawing is still being restored: merge it into the export
                target = self._bitmap.size
                merged = decode_png(self._restore_snapshot).crop((0, 0, target[0], target[1]))
                merged.alpha_composite(self._bitmap)
                return encode_png(merged)
            return encode_png(self._bitmap)
        except SignatureCodecError as exc:
            self._log_failure("export_failed", exc)
            self._degrade_to_empty()
            return EMPTY_SIGNATURE

    def import_image(
        self,
        image: SignatureImage,
        *,
        no_scale: bool = False,
        on_done: Optional[Callable[[], None]] = None,
    ) -> None:
        """
        Draw a previously exported signature onto the bitmap.

        With ``no_scale`` the image is placed 1:1 at the origin; otherwise it
        is stretched to the bitmap size. Decoding runs through the scheduler;
        ``on_done`` fires once the image has been applied (or dropped).
        An import requested before `begin` is kept and applied on `begin`.
        """
        if image.is_empty:
            if on_done is not None:
                on_done()
            return
        if self._bitmap is None:
            self._pending_import = (image, no_scale, on_done)
            return

        generation = self._generation

        def _task() -> None:
            try:
                # clear()/dispose() since scheduling invalidates this import
                if generation == self._generation and self._bitmap is not None:
                    self._blit(image, no_scale)
            finally:
                if on_done is not None:
                    on_done()

        self._schedule(_task)

    # ------------------------------------------------------------------ #
    # Resize reconciliation
    # ------------------------------------------------------------------ #
    def on_resize(self, new_container_size: SizeLike) -> None:
        if self._restoring:
            return
        size = _as_dims(new_container_size)
        if not size.has_area:
            return
        if self._bitmap is None:
            self.begin(size)
            return
        if self._bitmap.size == size.as_tuple():
            return

        snapshot: Optional[SignatureImage] = None
        snapshot_failed = False
        if not self._empty:
            try:
                snapshot = encode_png(self._bitmap)
            except SignatureCodecError as exc:
                self._log_failure("snapshot_failed", exc)
                snapshot_failed = True

        self._bitmap = self._blank(size)

        if snapshot is None:
            if snapshot_failed:
                self._degrade_to_empty()
            else:
                self._notify_change()
            return

        self._restoring = True
        self._restore_snapshot = snapshot
        self.import_image(snapshot, no_scale=True, on_done=self._release_restore_guard)

    def _release_restore_guard(self) -> None:
        self._restoring = False
        self._restore_snapshot = None
        self._notify_change()

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _blank(size: CanvasDimensions) -> Image.Image:
        return Image.new("RGBA", size.as_tuple(), (0, 0, 0, 0))

    def _dot(self, x: float, y: float) -> None:
        r = max(self._config.stroke_width, 1) / 2.0
        ImageDraw.Draw(self._bitmap).ellipse(
            [x - r, y - r, x + r, y + r], fill=self._config.pen_rgba
        )

    def _segment(self, start: Tuple[float, float], end: Tuple[float, float]) -> None:
        ImageDraw.Draw(self._bitmap).line(
            [start, end],
            fill=self._config.pen_rgba,
            width=max(self._config.stroke_width, 1),
            joint="curve",
        )
        # round cap so consecutive segments join without gaps
        self._dot(*end)

    def _blit(self, image: SignatureImage, no_scale: bool) -> None:
        try:
            src = decode_png(image)
        except SignatureCodecError as exc:
            self._log_failure("import_failed", exc)
            self._degrade_to_empty()
            return

        target = self._bitmap.size
        if not no_scale and src.size != target:
            src = src.resize(target, Image.Resampling.LANCZOS)
        if src.size != target:
            # 1:1 placement: crop or pad (transparent) to the bitmap size
            src = src.crop((0, 0, target[0], target[1]))

        if self._bitmap.getbbox() is None:
            self._bitmap.paste(src, (0, 0))
        else:
            self._bitmap.alpha_composite(src)
        self._empty = False
        self._notify_change()

    def _degrade_to_empty(self) -> None:
        self._session = None
        self._empty = True
        if self._bitmap is not None:
            self._bitmap = self._blank(self.size)
        self._notify_change()

    def _log_failure(self, event: str, exc: Exception) -> None:
        logger = self._logger
        if logger is None:
            from core.logging.logic.logger import get_logger
            logger = get_logger()
        logger.log(
            _FEATURE_ID,
            event,
            level="ERROR",
            reference_id=self._name,
            message=f"{type(exc).__name__}: {exc}",
        )

    def _emit_end(self) -> None:
        for cb in list(self._end_listeners):
            cb()

    def _notify_change(self) -> None:
        for cb in list(self._change_listeners):
            cb()
