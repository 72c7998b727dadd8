from __future__ import annotations

import unittest

from PIL import Image

from termpage.config import DarkMode
from termpage.rendering import colors


def _pixel(rgba, mode):
    img = Image.new("RGBA", (3, 2), rgba)
    return colors.apply(img, mode).getpixel((1, 1))


class InvertTests(unittest.TestCase):
    def test_white_becomes_dark_gray(self) -> None:
        self.assertEqual(_pixel((255, 255, 255, 255), DarkMode.INVERT), (30, 30, 30, 255))

    def test_black_becomes_white(self) -> None:
        self.assertEqual(_pixel((0, 0, 0, 255), DarkMode.INVERT), (255, 255, 255, 255))

    def test_channel_formula(self) -> None:
        r, g, b, a = _pixel((100, 200, 10, 77), DarkMode.INVERT)
        self.assertEqual((r, g, b), tuple(30 + (255 - v) * 225 // 255 for v in (100, 200, 10)))
        self.assertEqual(a, 77)


class SmartInvertTests(unittest.TestCase):
    def test_white_and_black(self) -> None:
        self.assertEqual(_pixel((255, 255, 255, 255), DarkMode.SMART), (30, 30, 30, 255))
        self.assertEqual(_pixel((0, 0, 0, 255), DarkMode.SMART), (255, 255, 255, 255))

    def test_red_keeps_hue(self) -> None:
        r, g, b, _ = _pixel((255, 0, 0, 255), DarkMode.SMART)
        self.assertEqual(r, 255)
        self.assertLess(g, 40)
        self.assertLess(b, 40)

    def test_dark_blue_turns_light_blue(self) -> None:
        r, g, b, _ = _pixel((0, 0, 128, 255), DarkMode.SMART)
        self.assertGreater(b, r)
        self.assertGreater(b, g)
        self.assertGreater(r + g + b, 128)

    def test_alpha_passes_through(self) -> None:
        self.assertEqual(_pixel((10, 20, 30, 128), DarkMode.SMART)[3], 128)


class TransformShapeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.img = Image.new("RGBA", (7, 5), (250, 240, 230, 200))
        self.img.putpixel((0, 0), (0, 0, 0, 255))
        self.img.putpixel((6, 4), (200, 30, 40, 0))

    def test_none_is_identity(self) -> None:
        self.assertIs(colors.apply(self.img, DarkMode.NONE), self.img)

    def test_dimensions_and_alpha_preserved(self) -> None:
        for mode in (DarkMode.SMART, DarkMode.INVERT):
            out = colors.apply(self.img, mode)
            self.assertEqual(out.size, self.img.size)
            self.assertEqual(out.mode, "RGBA")
            self.assertEqual(out.getchannel("A").tobytes(), self.img.getchannel("A").tobytes())

    def test_edges_transformed_like_interior(self) -> None:
        img = Image.new("RGBA", (4, 4), (255, 255, 255, 255))
        out = colors.apply(img, DarkMode.INVERT)
        self.assertEqual(out.tobytes(), bytes((30, 30, 30, 255)) * 16)

    def test_applying_twice_is_not_the_original(self) -> None:
        # The gray floor makes both transforms lossy.
        for mode in (DarkMode.SMART, DarkMode.INVERT):
            twice = colors.apply(colors.apply(self.img, mode), mode)
            self.assertEqual(twice.size, self.img.size)
            self.assertNotEqual(twice.tobytes(), self.img.tobytes())

    def test_rgb_input_is_promoted(self) -> None:
        out = colors.apply(Image.new("RGB", (2, 2), (255, 255, 255)), DarkMode.INVERT)
        self.assertEqual(out.getpixel((0, 0)), (30, 30, 30, 255))


if __name__ == "__main__":
    unittest.main()
