from __future__ import annotations

import io
import os
import re
import shutil
import tempfile
import unittest

from termpage.config import Config, DarkMode, FitMode, Orientation, RenderOptions
from termpage.document import ContentType
from termpage.rendering.emitter import Emitter
from termpage.staging import StagingArea
from termpage.viewer import MIXED_IMAGE_ROWS, PageViewer, horizontal_offset, image_rows

from fakes import A4_INCHES, LETTER_INCHES, FakeRasterizer, kitty_profile, make_output, sixel_profile


class HorizontalOffsetTests(unittest.TestCase):
    def test_alignments(self) -> None:
        self.assertEqual(horizontal_offset(80, 40, "center"), 20)
        self.assertEqual(horizontal_offset(80, 40, "left"), 0)
        self.assertEqual(horizontal_offset(80, 40, "right"), 40)

    def test_never_negative(self) -> None:
        for align in ("center", "left", "right"):
            self.assertEqual(horizontal_offset(10, 40, align), 0)


class ImageRowsTests(unittest.TestCase):
    def test_mixed_pages_get_half_the_rows(self) -> None:
        self.assertEqual(image_rows(ContentType.MIXED, 10), 5)
        self.assertEqual(image_rows(ContentType.MIXED, 23), 11)

    def test_mixed_pages_capped(self) -> None:
        self.assertEqual(image_rows(ContentType.MIXED, 60), MIXED_IMAGE_ROWS)

    def test_other_pages_get_everything(self) -> None:
        self.assertEqual(image_rows(ContentType.IMAGE, 60), 60)
        self.assertEqual(image_rows("text", 39), 39)
        self.assertEqual(image_rows(ContentType.IMAGE, -1), 0)


class PageViewerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmp, True)
        self.stream = io.StringIO()
        self.emitter = Emitter(make_output(self.stream), StagingArea(self.tmp), sixel_colors=8)

    def _viewer(self, raster, profile=None, options=None, protocol="auto"):
        profile = profile or kitty_profile(200, 100)
        return PageViewer(raster, options or RenderOptions(), self.emitter, protocol, lambda: profile)

    def test_show_page_kitty(self) -> None:
        raster = FakeRasterizer([LETTER_INCHES])
        lines = self._viewer(raster).show_page(0, 80, 40)
        self.assertEqual(lines, int(1331 / 36.0) + 1)
        out = self.stream.getvalue()
        # 1029 px wide page is 58 cells: centred in 80 columns.
        self.assertTrue(out.startswith("\x1b[11C"))
        self.assertIn("\x1b_G", out)
        self.assertEqual(os.listdir(self.tmp), [])

    def test_overflowing_page_is_clipped_not_squashed(self) -> None:
        raster = FakeRasterizer([LETTER_INCHES])
        viewer = self._viewer(raster, kitty_profile(80, 10), RenderOptions(fit_mode=FitMode.WIDTH))
        self.assertEqual(viewer.show_page(0, 80, 10), 10)
        box = re.search(r"c=(\d+),r=(\d+)", self.stream.getvalue())
        columns, rows = int(box.group(1)), int(box.group(2))
        self.assertEqual(rows, 10)
        # The 1367 px wide page is cut to 10 rows (360 px); the box keeps that shape.
        self.assertAlmostEqual((columns * 18) / (rows * 36), 1367 / 360, delta=0.1)

    def test_overflowing_sixel_page_is_cut_to_rows(self) -> None:
        raster = FakeRasterizer([LETTER_INCHES])
        viewer = self._viewer(raster, sixel_profile(80, 10), RenderOptions(fit_mode=FitMode.WIDTH))
        self.assertEqual(viewer.show_page(0, 80, 10), 10)
        self.assertIn('"1;1;850;250', self.stream.getvalue())

    def test_show_page_left_aligned(self) -> None:
        raster = FakeRasterizer([LETTER_INCHES])
        self._viewer(raster).show_page(0, 80, 40, align="left")
        self.assertTrue(self.stream.getvalue().startswith("\x1b_G"))

    def test_sixel_terminal_uses_pixel_path(self) -> None:
        raster = FakeRasterizer([A4_INCHES])
        lines = self._viewer(raster, sixel_profile()).show_page(0, 80, 40)
        self.assertGreater(lines, 0)
        self.assertLessEqual(raster.calls[-1][1], 100.0)
        self.assertIn("\x1bPq", self.stream.getvalue())

    def test_protocol_preference_overrides_family(self) -> None:
        raster = FakeRasterizer([A4_INCHES])
        self._viewer(raster, kitty_profile(), protocol="sixel").show_page(0, 80, 40)
        self.assertIn("\x1bPq", self.stream.getvalue())

    def test_failed_render_returns_zero(self) -> None:
        raster = FakeRasterizer([LETTER_INCHES], fail_pages={0})
        self.assertEqual(self._viewer(raster).show_page(0, 80, 40), 0)
        self.assertEqual(self.stream.getvalue(), "")

    def test_placeholder_on_failure(self) -> None:
        raster = FakeRasterizer([LETTER_INCHES], fail_pages={0})
        self.assertEqual(self._viewer(raster).show_or_placeholder(0, 80, 40), 2)
        out = self.stream.getvalue()
        self.assertIn("[Image content - page 1]", out)
        self.assertIn("(Image rendering failed)", out)

    def test_empty_area_draws_nothing(self) -> None:
        raster = FakeRasterizer([LETTER_INCHES])
        self.assertEqual(self._viewer(raster).show_page(0, 80, 0), 0)
        self.assertEqual(raster.calls, [])

    def test_dual_stacked_splits_rows(self) -> None:
        raster = FakeRasterizer([LETTER_INCHES, LETTER_INCHES])
        lines = self._viewer(raster).show_dual(0, 1, 80, 40, Orientation.STACKED, gap=10)
        self.assertGreater(lines, 0)
        self.assertLessEqual(lines, 40)
        # Each page is fitted into 20 rows: 17 usable rows of 36 px.
        self.assertEqual([c[0] for c in raster.calls], [0, 0, 1, 1])
        self.assertAlmostEqual(raster.calls[1][1], 17 * 36 / 792 * 72, delta=0.5)
        self.assertEqual(os.listdir(self.tmp), [])

    def test_dual_side_by_side_with_missing_second(self) -> None:
        raster = FakeRasterizer([A4_INCHES])
        options = RenderOptions(dark_mode=DarkMode.INVERT)
        lines = self._viewer(raster, options=options).show_dual(0, None, 81, 40, Orientation.SIDE_BY_SIDE)
        self.assertGreater(lines, 0)
        self.assertEqual(len(raster.calls), 2)

    def test_dual_failure_returns_zero(self) -> None:
        raster = FakeRasterizer([LETTER_INCHES, LETTER_INCHES], fail_pages={1})
        self.assertEqual(self._viewer(raster).show_dual(0, 1, 80, 40), 0)
        self.assertEqual(self.stream.getvalue(), "")

    def test_from_config(self) -> None:
        cfg = Config(path=os.path.join(self.tmp, "cfg.json"))
        cfg.update({"render": {"dark_mode": "smart"}, "terminal": {"protocol": "sixel"},
                    "staging": {"dir": os.path.join(self.tmp, "stage")}})
        viewer = PageViewer.from_config(FakeRasterizer([LETTER_INCHES]), cfg)
        self.assertEqual(viewer.options.dark_mode, DarkMode.SMART)
        self.assertEqual(viewer.protocol, "sixel")
        self.assertEqual(viewer.orientation, Orientation.STACKED)
        self.assertEqual(viewer.gap, 10)
        self.assertEqual(str(viewer.emitter.staging.path), os.path.join(self.tmp, "stage"))
        viewer.close()

    def test_layout_from_config_drives_dual(self) -> None:
        cfg = Config(path=os.path.join(self.tmp, "cfg.json"))
        cfg.update({"layout": {"orientation": "side_by_side", "gap_px": 40}})
        raster = FakeRasterizer([LETTER_INCHES, LETTER_INCHES])
        viewer = PageViewer.from_config(raster, cfg)
        self.assertEqual(viewer.orientation, Orientation.SIDE_BY_SIDE)
        self.assertEqual(viewer.gap, 40)

        viewer.emitter = self.emitter
        viewer.profile_source = lambda: sixel_profile(80, 40)
        self.assertGreater(viewer.show_dual(0, 1, 80, 40), 0)

        dpi = raster.calls[1][1]
        self.assertEqual(raster.calls[3][1], dpi)
        size = re.search(r'"1;1;(\d+);(\d+)', self.stream.getvalue())
        width, height = int(size.group(1)), int(size.group(2))
        self.assertEqual(width, 2 * int(8.5 * dpi) + 40)
        self.assertEqual(height, int(11 * dpi))


if __name__ == "__main__":
    unittest.main()
