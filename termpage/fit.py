#!/usr/bin/env python3
# termpage/fit.py
"""
Fit planning: how many pixels a page should occupy and at what DPI to rasterize it.

The page aspect ratio comes from a cheap 72 DPI reference render. From the
reference size and the fitted target size the render DPI is solved directly,
so the page is rasterized once at the right resolution and never rescaled.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from termpage.config import FitMode, RenderOptions
from termpage.geometry import TerminalProfile

__all__ = [
    "ProtocolKind",
    "FitPlan",
    "REFERENCE_DPI",
    "MIN_DPI",
    "max_dpi_for",
    "target_pixels",
    "fit_dimensions",
    "plan",
]

# Images never touch the terminal edges.
PADDING_COLUMNS = 4
PADDING_ROWS = 3

REFERENCE_DPI = 72.0
MIN_DPI = 36.0
MAX_DPI_CELL = 300.0
# Sixel encoding cost grows with pixel count; 100 DPI is still readable.
MAX_DPI_PIXEL = 100.0


class ProtocolKind(str, Enum):
    CELL = "cell"      # sized in character cells (kitty)
    PIXEL = "pixel"    # sized in pixels (sixel)


@dataclass(frozen=True)
class FitPlan:
    target_width: int
    target_height: int
    dpi: float


def max_dpi_for(kind: ProtocolKind) -> float:
    return MAX_DPI_CELL if ProtocolKind(kind) is ProtocolKind.CELL else MAX_DPI_PIXEL


def target_pixels(profile: TerminalProfile, scale: float = 1.0) -> Tuple[int, int]:
    """Pixel box available for the image after padding, times the user zoom."""
    if not scale or scale <= 0 or not math.isfinite(scale):
        scale = 1.0
    cols = max(1, profile.columns - PADDING_COLUMNS)
    rows = max(1, profile.rows - PADDING_ROWS)
    width = int(cols * profile.cell_width * scale)
    height = int(rows * profile.cell_height * scale)
    return max(1, width), max(1, height)


def fit_dimensions(target_w: int, target_h: int, aspect: float, mode: FitMode) -> Tuple[int, int]:
    """
    Fit a page of the given aspect (height / width) into target_w x target_h.

    height: height first, shrunk if the width would overflow.
    width:  width first, height may overflow (caller scrolls or clips).
    auto:   width first, shrunk if the height would overflow.
    """
    if not math.isfinite(aspect) or aspect <= 0:
        aspect = 1.0
    mode = FitMode(mode)

    if mode is FitMode.HEIGHT:
        h = target_h
        w = int(h / aspect)
        if w > target_w:
            w = target_w
            h = int(w * aspect)
    elif mode is FitMode.WIDTH:
        w = target_w
        h = int(w * aspect)
    else:
        w = target_w
        h = int(w * aspect)
        if h > target_h:
            h = target_h
            w = int(h / aspect)
    return max(1, w), max(1, h)


def plan(
    profile: TerminalProfile,
    options: RenderOptions,
    reference_size: Tuple[int, int],
    max_dpi: float = MAX_DPI_CELL,
) -> FitPlan:
    """
    Plan the render of one page.

    reference_size is the (width, height) of the page rendered at REFERENCE_DPI.
    The DPI is taken from whichever axis is tighter, then clamped to
    [MIN_DPI, max_dpi].
    """
    ref_w = max(1, int(reference_size[0]))
    ref_h = max(1, int(reference_size[1]))
    target_w, target_h = target_pixels(profile, options.scale)
    w, h = fit_dimensions(target_w, target_h, ref_h / ref_w, options.fit_mode)

    dpi_for_width = w / ref_w * REFERENCE_DPI
    dpi_for_height = h / ref_h * REFERENCE_DPI
    dpi = min(dpi_for_width, dpi_for_height)
    dpi = max(MIN_DPI, min(float(max_dpi), dpi))
    return FitPlan(w, h, dpi)
