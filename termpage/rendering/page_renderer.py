#!/usr/bin/env python3
# termpage/rendering/page_renderer.py
"""
Page rendering: plan the fit, rasterize at the planned DPI, apply dark mode,
and report the result in both pixels and character cells.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from PIL import Image

from termpage.config import RenderOptions
from termpage.errors import RasterizeFailure
from termpage.fit import REFERENCE_DPI, ProtocolKind, max_dpi_for, plan
from termpage.geometry import TerminalProfile
from termpage.rendering import colors

__all__ = ["Rasterizer", "RenderedPage", "cells_for", "clip_to_rows", "render_page"]

log = logging.getLogger(__name__)


class Rasterizer(Protocol):
    """Anything that can turn a page index into a bitmap at a given DPI."""

    def rasterize(self, page: int, dpi: float) -> Image.Image:
        ...


@dataclass
class RenderedPage:
    bitmap: Image.Image
    pixel_width: int
    pixel_height: int
    char_width: int
    char_lines: int
    page: Optional[int] = None


def cells_for(pixel_width: int, pixel_height: int, profile: TerminalProfile) -> Tuple[int, int]:
    """
    Character extents of a bitmap as (columns, lines).

    Rounds up by one whole cell so the reported area always covers the
    image. Lines are clamped to the rows the caller has available; the
    bitmap itself is cut to match by clip_to_rows.
    """
    columns = int(pixel_width / profile.cell_width) + 1
    lines = int(pixel_height / profile.cell_height) + 1
    lines = min(lines, max(0, profile.rows))
    return columns, lines


def clip_to_rows(img: Image.Image, profile: TerminalProfile) -> Image.Image:
    """
    Crop the bottom off a bitmap taller than the rows available.

    The result never extends past the last available row.
    """
    if int(img.height / profile.cell_height) + 1 <= profile.rows:
        return img
    max_height = max(1, int(max(1, profile.rows) * profile.cell_height))
    if img.height <= max_height:
        return img
    return img.crop((0, 0, img.width, max_height))


def _rasterize(rasterizer: Rasterizer, page: int, dpi: float) -> Image.Image:
    try:
        return rasterizer.rasterize(page, dpi)
    except RasterizeFailure:
        raise
    except Exception as e:
        raise RasterizeFailure(page, e) from e


def render_page(
    rasterizer: Rasterizer,
    page: int,
    profile: TerminalProfile,
    options: RenderOptions,
    kind: ProtocolKind = ProtocolKind.CELL,
) -> RenderedPage:
    """Render one page sized for profile. Raises RasterizeFailure only."""
    t0 = time.time()

    # Reference render: only its size is used.
    reference = _rasterize(rasterizer, page, REFERENCE_DPI)
    ref_size = reference.size
    del reference

    fit = plan(profile, options, ref_size, max_dpi_for(kind))
    img = _rasterize(rasterizer, page, fit.dpi)
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    img = colors.apply(img, options.dark_mode)
    img = clip_to_rows(img, profile)

    width, height = img.size
    columns, lines = cells_for(width, height, profile)
    log.debug(
        "page %d: ref %dx%d, planned %dx%d @ %.1f dpi, got %dx%d px = %dx%d cells in %.1fms",
        page, ref_size[0], ref_size[1], fit.target_width, fit.target_height, fit.dpi,
        width, height, columns, lines, (time.time() - t0) * 1000.0,
    )
    return RenderedPage(img, width, height, columns, lines, page)
