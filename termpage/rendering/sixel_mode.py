#!/usr/bin/env python3
# termpage/rendering/sixel_mode.py
"""
Sixel (1x6) encoder.
The image is cut into bands six pixels tall. For each palette color in a
band, every pixel column becomes one character whose six bits mark which
of the column's pixels have that color. Images are addressed in pixels.
"""

from __future__ import annotations

from itertools import groupby
from pathlib import Path
from typing import List

import numpy as np
from PIL import Image

from termpage.fit import ProtocolKind

# DCS q ... ST
SIXEL_START = "\x1bPq"
SIXEL_END = "\x1b\\"

BAND = 6
# Sixel data chars are 0x3F + six-bit column mask.
SIXEL_BASE = 0x3F


def _fit_pixels(img: Image.Image, width: int, height: int) -> Image.Image:
    """Scale to fit inside width x height, keeping aspect."""
    width, height = max(1, int(width)), max(1, int(height))
    if img.width == width and img.height == height:
        return img
    ratio = min(width / img.width, height / img.height)
    size = (max(1, int(img.width * ratio)), max(1, int(img.height * ratio)))
    if size == img.size:
        return img
    return img.resize(size, Image.LANCZOS)


def _run_length(chars: str) -> str:
    """Sixel RLE: runs of 4+ become !<count><char>."""
    out: List[str] = []
    for ch, run in groupby(chars):
        n = len(list(run))
        out.append(f"!{n}{ch}" if n > 3 else ch * n)
    return "".join(out)


def encode_sixel(img: Image.Image, colors: int = 256) -> str:
    """Encode an image as a complete sixel sequence."""
    img = img.convert("RGB")
    colors = max(2, min(256, int(colors)))
    pal_img = img.quantize(colors=colors, method=Image.Quantize.MEDIANCUT, dither=Image.Dither.NONE)
    idx = np.asarray(pal_img, dtype=np.uint8)
    h, w = idx.shape
    used = int(idx.max()) + 1 if idx.size else 1
    palette = (pal_img.getpalette() or [])[: used * 3]
    palette += [0] * (used * 3 - len(palette))

    parts: List[str] = [SIXEL_START, f'"1;1;{w};{h}']
    # Palette entries are RGB percentages.
    for i in range(used):
        r, g, b = palette[i * 3 : i * 3 + 3]
        parts.append(f"#{i};2;{r * 100 // 255};{g * 100 // 255};{b * 100 // 255}")

    for top in range(0, h, BAND):
        band = idx[top : top + BAND]
        rows = []
        for color in np.unique(band):
            bits = np.zeros(w, dtype=np.uint8)
            for ry in range(band.shape[0]):
                bits |= (band[ry] == color).astype(np.uint8) << ry
            data = (bits + SIXEL_BASE).tobytes().decode("ascii")
            rows.append(f"#{int(color)}{_run_length(data)}")
        # "$" returns to the band start for the next color, "-" moves down a band.
        parts.append("$".join(rows) + "-")

    parts.append(SIXEL_END)
    return "".join(parts)


class SixelBackend:
    name = "sixel"
    kind = ProtocolKind.PIXEL

    def __init__(self, colors: int = 256):
        self.colors = colors

    def draw(self, path: Path, width: int, height: int) -> str:
        """width/height are pixels."""
        with Image.open(path) as img:
            img.load()
            fitted = _fit_pixels(img, width, height)
        return encode_sixel(fitted, self.colors)
