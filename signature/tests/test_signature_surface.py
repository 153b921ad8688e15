"""
signature/tests/test_signature_surface.py

Behaviour of the headless signature surface: drawing, clearing, export/import
and resize reconciliation (including the in-flight restore guard).
"""

from __future__ import annotations

import unittest
from unittest.mock import MagicMock, patch

from PIL import Image, ImageDraw

from signature.exceptions.errors import SignatureCodecError
from signature.logic.signature_codec import decode_png, encode_png
from signature.logic.signature_surface import SignatureSurface
from signature.models.pointer_event import PointerEvent
from signature.models.signature_config import SignatureConfig
from signature.models.signature_image import EMPTY_SIGNATURE, CanvasDimensions, SignatureImage

PEN = SignatureConfig(stroke_width=3)


class ManualScheduler:
    """Collects deferred tasks so a test decides when an import completes."""

    def __init__(self) -> None:
        self.tasks: list = []

    def __call__(self, task) -> None:
        self.tasks.append(task)

    def run_all(self) -> None:
        while self.tasks:
            self.tasks.pop(0)()


def _alpha(surface: SignatureSurface, x: int, y: int) -> int:
    return surface.image.getpixel((x, y))[3]


def _line(surface: SignatureSurface, start, end) -> None:
    surface.draw([
        PointerEvent.down(*start),
        PointerEvent.move(*end),
        PointerEvent.up(*end),
    ])


class TestSignatureSurfaceDrawing(unittest.TestCase):
    def setUp(self) -> None:
        self.logger = MagicMock()
        self.surface = SignatureSurface(config=PEN, logger=self.logger)

    def test_begin_with_zero_area_is_skipped(self) -> None:
        self.assertFalse(self.surface.begin((0, 150)))
        self.assertIsNone(self.surface.size)
        self.assertTrue(self.surface.begin((400, 150)))
        self.assertEqual(self.surface.size, CanvasDimensions(400, 150))

    def test_new_surface_is_empty(self) -> None:
        self.surface.begin((400, 150))
        self.assertTrue(self.surface.is_empty())
        self.assertEqual(self.surface.export(), EMPTY_SIGNATURE)

    def test_draw_marks_non_empty_and_notifies_end_of_stroke(self) -> None:
        ended = []
        self.surface.add_end_listener(lambda: ended.append(True))
        self.surface.begin((400, 150))

        _line(self.surface, (20, 20), (300, 20))

        self.assertFalse(self.surface.is_empty())
        self.assertEqual(ended, [True])
        self.assertGreater(_alpha(self.surface, 20, 20), 0)
        self.assertGreater(_alpha(self.surface, 160, 20), 0)
        self.assertGreater(_alpha(self.surface, 300, 20), 0)
        self.assertEqual(_alpha(self.surface, 160, 80), 0)

    def test_move_without_down_is_ignored(self) -> None:
        self.surface.begin((400, 150))
        self.surface.draw([PointerEvent.move(50, 50), PointerEvent.up(60, 60)])
        self.assertTrue(self.surface.is_empty())
        self.assertIsNone(self.surface.image.getbbox())

    def test_draw_before_begin_is_ignored(self) -> None:
        _line(self.surface, (10, 10), (40, 10))
        self.assertTrue(self.surface.is_empty())

    def test_clear_wipes_fully(self) -> None:
        self.surface.begin((400, 150))
        _line(self.surface, (20, 20), (300, 20))

        self.surface.clear()

        self.assertTrue(self.surface.is_empty())
        self.assertEqual(self.surface.export(), EMPTY_SIGNATURE)
        self.assertIsNone(self.surface.image.getbbox())
        self.surface.clear()
        self.assertTrue(self.surface.is_empty())

    def test_clear_discards_stroke_in_progress(self) -> None:
        self.surface.begin((400, 150))
        self.surface.draw([PointerEvent.down(10, 10), PointerEvent.move(50, 10)])
        self.assertTrue(self.surface.stroke_in_progress)
        self.surface.clear()
        self.assertFalse(self.surface.stroke_in_progress)
        self.surface.draw([PointerEvent.move(90, 90)])
        self.assertTrue(self.surface.is_empty())

    def test_export_returns_png_of_bitmap_size(self) -> None:
        self.surface.begin((400, 150))
        _line(self.surface, (20, 20), (300, 20))
        sig = self.surface.export()
        self.assertFalse(sig.is_empty)
        self.assertTrue(sig.data_url.startswith("data:image/png;base64,"))


class TestSignatureSurfaceImport(unittest.TestCase):
    def setUp(self) -> None:
        self.logger = MagicMock()
        self.surface = SignatureSurface(config=PEN, logger=self.logger)

    def _source(self, size=(400, 150)) -> tuple[Image.Image, SignatureImage]:
        src = Image.new("RGBA", size, (0, 0, 0, 0))
        ImageDraw.Draw(src).line([(30, 40), (200, 90)], fill=(0, 0, 255, 255), width=3)
        return src, encode_png(src)

    def test_import_no_scale_is_pixel_identical(self) -> None:
        src, sig = self._source()
        self.surface.begin((400, 150))

        self.surface.import_image(sig, no_scale=True)

        self.assertFalse(self.surface.is_empty())
        self.assertEqual(self.surface.image.tobytes(), src.tobytes())

    def test_import_without_no_scale_stretches_to_bitmap(self) -> None:
        src = Image.new("RGBA", (100, 50), (0, 0, 0, 0))
        ImageDraw.Draw(src).rectangle([90, 40, 99, 49], fill=(0, 0, 0, 255))
        self.surface.begin((200, 100))

        self.surface.import_image(encode_png(src), no_scale=False)

        self.assertEqual(self.surface.size, CanvasDimensions(200, 100))
        self.assertGreater(_alpha(self.surface, 195, 95), 0)
        self.assertEqual(_alpha(self.surface, 20, 20), 0)

    def test_import_empty_sentinel_keeps_surface_empty(self) -> None:
        done = []
        self.surface.begin((400, 150))
        self.surface.import_image(EMPTY_SIGNATURE, on_done=lambda: done.append(True))
        self.assertTrue(self.surface.is_empty())
        self.assertEqual(done, [True])

    def test_import_before_begin_is_applied_on_begin(self) -> None:
        _, sig = self._source()
        self.surface.import_image(sig, no_scale=False)
        self.assertTrue(self.surface.is_empty())

        self.surface.begin((400, 150))

        self.assertFalse(self.surface.is_empty())
        self.assertGreater(_alpha(self.surface, 30, 40), 0)

    def test_undecodable_image_degrades_to_empty_and_is_logged(self) -> None:
        self.surface.begin((400, 150))
        _line(self.surface, (20, 20), (300, 20))

        self.surface.import_image(SignatureImage("data:image/png;base64,bm90IGEgcG5n"))

        self.assertTrue(self.surface.is_empty())
        self.assertEqual(self.surface.export(), EMPTY_SIGNATURE)
        self.logger.log.assert_called_once()
        args, kwargs = self.logger.log.call_args
        self.assertEqual(args[:2], ("signature", "import_failed"))
        self.assertEqual(kwargs["level"], "ERROR")

    def test_import_composites_over_existing_strokes(self) -> None:
        _, sig = self._source()
        self.surface.begin((400, 150))
        _line(self.surface, (10, 140), (380, 140))

        self.surface.import_image(sig, no_scale=True)

        self.assertGreater(_alpha(self.surface, 200, 140), 0)
        self.assertGreater(_alpha(self.surface, 30, 40), 0)


class TestSignatureSurfaceResize(unittest.TestCase):
    def setUp(self) -> None:
        self.logger = MagicMock()
        self.surface = SignatureSurface(config=PEN, logger=self.logger)
        self.surface.begin((400, 150))

    def test_identical_resize_is_idempotent(self) -> None:
        _line(self.surface, (20, 20), (300, 20))
        self.surface.on_resize((600, 150))
        once = self.surface.image.tobytes()

        self.surface.on_resize((600, 150))

        self.assertEqual(self.surface.image.tobytes(), once)

    def test_rotation_keeps_line_at_original_pixels(self) -> None:
        _line(self.surface, (20, 20), (300, 20))

        self.surface.on_resize((800, 150))

        self.assertEqual(self.surface.size, CanvasDimensions(800, 150))
        self.assertFalse(self.surface.is_empty())
        self.assertGreater(_alpha(self.surface, 20, 20), 0)
        self.assertGreater(_alpha(self.surface, 300, 20), 0)
        # not stretched horizontally or vertically
        self.assertEqual(_alpha(self.surface, 600, 20), 0)
        self.assertEqual(_alpha(self.surface, 300, 40), 0)
        self.assertFalse(self.surface.export().is_empty)

    def test_resize_there_and_back_stays_non_empty(self) -> None:
        _line(self.surface, (20, 20), (300, 20))
        self.surface.on_resize((200, 100))
        self.assertFalse(self.surface.is_empty())
        self.surface.on_resize((400, 150))
        self.assertFalse(self.surface.is_empty())
        self.assertEqual(self.surface.size, CanvasDimensions(400, 150))

    def test_empty_surface_stays_empty_across_resizes(self) -> None:
        for size in ((800, 150), (0, 0), (320, 90), (320, 90), (1024, 300)):
            self.surface.on_resize(size)
            self.assertTrue(self.surface.is_empty())
        self.assertEqual(self.surface.size, CanvasDimensions(1024, 300))
        self.assertEqual(self.surface.export(), EMPTY_SIGNATURE)

    def test_zero_area_resize_is_ignored(self) -> None:
        _line(self.surface, (20, 20), (300, 20))
        self.surface.on_resize((0, 150))
        self.assertEqual(self.surface.size, CanvasDimensions(400, 150))
        self.assertFalse(self.surface.is_empty())

    def test_resize_mid_stroke_continues_from_last_point(self) -> None:
        self.surface.draw([PointerEvent.down(10, 10), PointerEvent.move(50, 10)])
        self.surface.on_resize((500, 150))
        self.surface.draw([PointerEvent.move(100, 10), PointerEvent.up(100, 10)])

        self.assertGreater(_alpha(self.surface, 30, 10), 0)
        self.assertGreater(_alpha(self.surface, 75, 10), 0)
        self.assertFalse(self.surface.stroke_in_progress)

    def test_snapshot_failure_degrades_to_empty_and_is_logged(self) -> None:
        _line(self.surface, (20, 20), (300, 20))
        with patch(
            "signature.logic.signature_surface.encode_png",
            side_effect=SignatureCodecError("boom"),
        ):
            self.surface.on_resize((800, 150))

        self.assertTrue(self.surface.is_empty())
        self.assertEqual(self.surface.size, CanvasDimensions(800, 150))
        self.assertEqual(self.logger.log.call_args[0][1], "snapshot_failed")


class TestSignatureSurfaceRestoreGuard(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = ManualScheduler()
        self.surface = SignatureSurface(config=PEN, scheduler=self.scheduler, logger=MagicMock())
        self.surface.begin((400, 150))
        _line(self.surface, (20, 20), (300, 20))

    def test_resize_during_restore_is_dropped(self) -> None:
        self.surface.on_resize((800, 150))
        self.assertTrue(self.surface.is_restoring)
        self.assertEqual(len(self.scheduler.tasks), 1)

        self.surface.on_resize((600, 150))

        self.assertEqual(self.surface.size, CanvasDimensions(800, 150))
        self.assertEqual(len(self.scheduler.tasks), 1)

        self.scheduler.run_all()

        self.assertFalse(self.surface.is_restoring)
        self.assertFalse(self.surface.is_empty())
        self.assertGreater(_alpha(self.surface, 300, 20), 0)
        # drawn once at 1:1, no double scaling
        self.assertEqual(_alpha(self.surface, 600, 20), 0)
        self.assertEqual(_alpha(self.surface, 300, 40), 0)

    def test_guard_released_by_completion_then_resize_applies(self) -> None:
        self.surface.on_resize((800, 150))
        self.scheduler.run_all()

        self.surface.on_resize((500, 150))

        self.assertEqual(self.surface.size, CanvasDimensions(500, 150))
        self.assertTrue(self.surface.is_restoring)
        self.scheduler.run_all()
        self.assertGreater(_alpha(self.surface, 300, 20), 0)

    def test_export_while_restore_in_flight_contains_the_drawing(self) -> None:
        self.surface.on_resize((800, 150))
        self.assertFalse(self.surface.is_empty())

        exported = decode_png(self.surface.export())

        self.assertEqual(exported.size, (800, 150))
        self.assertGreater(exported.getpixel((300, 20))[3], 0)

    def test_clear_during_restore_drops_the_pending_import(self) -> None:
        self.surface.on_resize((800, 150))
        self.surface.clear()
        self.scheduler.run_all()

        self.assertTrue(self.surface.is_empty())
        self.assertFalse(self.surface.is_restoring)
        self.assertIsNone(self.surface.image.getbbox())


if __name__ == "__main__":
    unittest.main()
