#!/usr/bin/env python3
# termpage/composite.py
"""
Dual-page compositing engine for termpage.

Responsible for assembling two rendered pages into a single RGBA image,
either stacked (one above the other) or side by side, with a pixel gap.

Each page is centred on the axis it does not share, so pages of different
size sit neatly. The canvas is filled with the background first and pages
are pasted opaque over it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

from termpage.config import DarkMode, Orientation
from termpage.geometry import TerminalProfile
from termpage.rendering.page_renderer import RenderedPage, cells_for, clip_to_rows

__all__ = ["CompositeLayout", "compose", "LIGHT_BACKGROUND", "DARK_BACKGROUND"]

RGBA = Tuple[int, int, int, int]

LIGHT_BACKGROUND: RGBA = (255, 255, 255, 255)
DARK_BACKGROUND: RGBA = (30, 30, 30, 255)


@dataclass(frozen=True)
class CompositeLayout:
    orientation: Orientation = Orientation.STACKED
    gap: int = 10
    background: RGBA = LIGHT_BACKGROUND

    @classmethod
    def for_mode(cls, orientation: Orientation, gap: int, dark_mode: DarkMode) -> "CompositeLayout":
        """Layout whose background matches the pages' color treatment."""
        bg = LIGHT_BACKGROUND if DarkMode(dark_mode) is DarkMode.NONE else DARK_BACKGROUND
        return cls(Orientation(orientation), max(0, int(gap)), bg)


def compose(
    first: RenderedPage,
    second: Optional[RenderedPage],
    layout: CompositeLayout,
    profile: TerminalProfile,
) -> RenderedPage:
    """
    Assemble first and (optionally) second into one page.

    Stacked:      width = max(w1, w2), height = h1 + gap + h2
    Side by side: width = w1 + gap + w2, height = max(h1, h2)
    A missing second page counts as 0x0. Rows past the profile are cropped.
    """
    w1, h1 = first.bitmap.size
    w2, h2 = second.bitmap.size if second is not None else (0, 0)
    gap = max(0, int(layout.gap))

    # --- Canvas size and paste positions ---
    if Orientation(layout.orientation) is Orientation.STACKED:
        total_w = max(w1, w2)
        total_h = h1 + gap + h2
        pos1 = ((total_w - w1) // 2, 0)
        pos2 = ((total_w - w2) // 2, h1 + gap)
    else:
        total_w = w1 + gap + w2
        total_h = max(h1, h2)
        pos1 = (0, (total_h - h1) // 2)
        pos2 = (w1 + gap, (total_h - h2) // 2)

    # --- Background first, then opaque pastes ---
    canvas = Image.new("RGBA", (max(1, total_w), max(1, total_h)), tuple(layout.background))
    canvas.paste(_rgba(first.bitmap), pos1)
    if second is not None:
        canvas.paste(_rgba(second.bitmap), pos2)

    canvas = clip_to_rows(canvas, profile)
    total_w, total_h = canvas.size
    columns, lines = cells_for(total_w, total_h, profile)
    return RenderedPage(canvas, total_w, total_h, columns, lines, None)


def _rgba(img: Image.Image) -> Image.Image:
    return img if img.mode == "RGBA" else img.convert("RGBA")
