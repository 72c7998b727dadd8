#!/usr/bin/env python3
# termpage/rendering/colors.py
"""
Dark-mode color transforms.

- none:   identity
- invert: full channel inversion remapped onto 30..255 so white paper turns
          dark gray, not black
- smart:  inverts HSL lightness only, so a red highlight stays red

Both dark transforms work on the whole RGBA image at once and keep alpha.
Neither is an exact involution: the gray floor means applying one twice
does not give back the source pixels.
"""

from __future__ import annotations

import numpy as np
from PIL import Image

from termpage.config import DarkMode

__all__ = ["apply", "simple_invert", "smart_invert", "rgb_to_hsl", "hsl_to_rgb"]

# out = INVERT_FLOOR + (255 - in) * INVERT_SPAN // 255
INVERT_FLOOR = 30
INVERT_SPAN = 225

# l' = SMART_FLOOR + (1 - l) * SMART_SPAN
SMART_FLOOR = 0.12
SMART_SPAN = 0.88


def _rgba_array(img: Image.Image) -> np.ndarray:
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return np.asarray(img, dtype=np.uint8)


def simple_invert(img: Image.Image) -> Image.Image:
    arr = _rgba_array(img)
    out = arr.copy()
    rgb = arr[..., :3].astype(np.int32)
    out[..., :3] = (INVERT_FLOOR + (255 - rgb) * INVERT_SPAN // 255).astype(np.uint8)
    return Image.fromarray(out, "RGBA")


def rgb_to_hsl(rgb: np.ndarray):
    """rgb: float array (..., 3) in [0, 1]. Returns (h, s, l), each in [0, 1]."""
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    mx = rgb.max(axis=-1)
    mn = rgb.min(axis=-1)
    l = (mx + mn) / 2.0
    d = mx - mn
    chromatic = d > 0

    # Placeholders keep the masked-out divisions finite.
    safe_d = np.where(chromatic, d, 1.0)
    denom = np.where(l > 0.5, 2.0 - mx - mn, mx + mn)
    s = np.where(chromatic, d / np.where(chromatic, denom, 1.0), 0.0)

    h = np.where(
        mx == r,
        (g - b) / safe_d + np.where(g < b, 6.0, 0.0),
        np.where(mx == g, (b - r) / safe_d + 2.0, (r - g) / safe_d + 4.0),
    )
    h = np.where(chromatic, h / 6.0, 0.0)
    return h, s, l


def _hue_to_rgb(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0, t + 1.0, t)
    t = np.where(t > 1, t - 1.0, t)
    return np.where(
        t < 1.0 / 6.0,
        p + (q - p) * 6.0 * t,
        np.where(
            t < 0.5,
            q,
            np.where(t < 2.0 / 3.0, p + (q - p) * (2.0 / 3.0 - t) * 6.0, p),
        ),
    )


def hsl_to_rgb(h: np.ndarray, s: np.ndarray, l: np.ndarray) -> np.ndarray:
    """Inverse of rgb_to_hsl. Returns float array (..., 3) in [0, 1]."""
    q = np.where(l < 0.5, l * (1.0 + s), l + s - l * s)
    p = 2.0 * l - q
    r = _hue_to_rgb(p, q, h + 1.0 / 3.0)
    g = _hue_to_rgb(p, q, h)
    b = _hue_to_rgb(p, q, h - 1.0 / 3.0)
    rgb = np.stack([r, g, b], axis=-1)
    gray = (s == 0)[..., None]
    return np.where(gray, l[..., None], rgb)


def smart_invert(img: Image.Image) -> Image.Image:
    arr = _rgba_array(img)
    rgb = arr[..., :3].astype(np.float64) / 255.0
    h, s, l = rgb_to_hsl(rgb)
    l = SMART_FLOOR + (1.0 - l) * SMART_SPAN
    out = arr.copy()
    # Truncate, not round: white must land on int(0.12 * 255) == 30.
    out[..., :3] = np.clip(hsl_to_rgb(h, s, l) * 255.0, 0, 255).astype(np.uint8)
    return Image.fromarray(out, "RGBA")


def apply(img: Image.Image, mode: DarkMode) -> Image.Image:
    """Apply the dark-mode transform named by mode."""
    mode = DarkMode(mode)
    if mode is DarkMode.SMART:
        return smart_invert(img)
    if mode is DarkMode.INVERT:
        return simple_invert(img)
    return img
