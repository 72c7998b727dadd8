#!/usr/bin/env python3
# termpage/viewer.py
"""
Display pipeline: detect geometry, render, optionally composite, emit.

One call draws one page (or one pair of pages) at the current cursor
position and reports how many terminal lines it used, so the caller can
place whatever comes next.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from termpage.composite import CompositeLayout, compose
from termpage.config import Config, Orientation, RenderOptions
from termpage.document import ContentType
from termpage.errors import RenderFailure
from termpage.geometry import TerminalProfile, detect
from termpage.rendering.emitter import Emitter
from termpage.rendering.page_renderer import Rasterizer, render_page
from termpage.staging import StagingArea

__all__ = ["PageViewer", "horizontal_offset", "image_rows", "MIXED_IMAGE_ROWS"]

log = logging.getLogger(__name__)

# Cap on image height for pages that also carry a few lines of text.
MIXED_IMAGE_ROWS = 12


def horizontal_offset(columns: int, image_columns: int, align: str = "center") -> int:
    """Columns to skip before drawing an image of image_columns cells."""
    if align == "right":
        offset = columns - image_columns
    elif align == "left":
        offset = 0
    else:
        offset = (columns - image_columns) // 2
    return max(0, offset)


def image_rows(content: ContentType, rows: int) -> int:
    """Rows the page image may take out of rows, given what is on the page."""
    if ContentType(content) is ContentType.MIXED:
        return max(0, min(rows // 2, MIXED_IMAGE_ROWS))
    return max(0, rows)


class PageViewer:
    """Renders document pages into the terminal."""

    def __init__(
        self,
        rasterizer: Rasterizer,
        options: RenderOptions,
        emitter: Optional[Emitter] = None,
        protocol: str = "auto",
        profile_source: Callable[[], TerminalProfile] = detect,
        orientation: Orientation = Orientation.STACKED,
        gap: int = 10,
    ):
        self.rasterizer = rasterizer
        self.options = options
        self.emitter = emitter or Emitter()
        self.protocol = protocol
        self.profile_source = profile_source
        self.orientation = Orientation(orientation)
        self.gap = max(0, int(gap))

    @classmethod
    def from_config(cls, rasterizer: Rasterizer, cfg: Config) -> "PageViewer":
        emitter = Emitter(
            staging=StagingArea(cfg.staging_dir),
            sixel_colors=int(cfg["sixel"]["colors"]),
        )
        layout = cfg["layout"]
        return cls(
            rasterizer,
            RenderOptions.from_config(cfg),
            emitter,
            cfg.protocol,
            orientation=Orientation(layout["orientation"]),
            gap=int(layout["gap_px"]),
        )

    def close(self) -> None:
        self.emitter.staging.cleanup()

    # -------- single page --------

    def show_page(self, page: int, columns: int, rows: int, align: str = "center") -> int:
        """Draw one page into a columns x rows area. Returns lines used, 0 on failure."""
        if rows <= 0 or columns <= 0:
            return 0
        t0 = time.time()
        profile = self.profile_source().with_area(columns, rows)
        backend = self.emitter.backend_for(profile, self.protocol)
        try:
            rendered = render_page(self.rasterizer, page, profile, self.options, backend.kind)
        except RenderFailure as e:
            log.warning("%s", e)
            return 0

        offset = horizontal_offset(columns, rendered.char_width, align)
        lines = self.emitter.emit(rendered, backend.name, offset, f"page_{page}")
        log.debug("page %d shown via %s in %.1fms", page, backend.name, (time.time() - t0) * 1000.0)
        return lines

    def show_or_placeholder(self, page: int, columns: int, rows: int, align: str = "center") -> int:
        """Like show_page, but writes a two-line text placeholder on failure."""
        lines = self.show_page(page, columns, rows, align)
        if lines > 0:
            return lines
        out = self.emitter.output
        try:
            out.write(f"  [Image content - page {page + 1}]\r\n")
            out.write("  (Image rendering failed)\r\n")
            out.flush()
        except OSError as e:
            log.warning("placeholder write failed: %s", e)
            return 0
        return 2

    # -------- two pages --------

    def show_dual(
        self,
        first: int,
        second: Optional[int],
        columns: int,
        rows: int,
        orientation: Optional[Orientation] = None,
        gap: Optional[int] = None,
    ) -> int:
        """
        Draw two pages as one composite image.

        Stacked pages each get half the rows, side-by-side pages half the
        columns. second may be None for an odd trailing page. orientation and
        gap default to the viewer's layout.
        """
        if rows <= 0 or columns <= 0:
            return 0
        orientation = Orientation(self.orientation if orientation is None else orientation)
        gap = self.gap if gap is None else gap
        profile = self.profile_source().with_area(columns, rows)
        backend = self.emitter.backend_for(profile, self.protocol)

        if orientation is Orientation.STACKED:
            area1 = area2 = (columns, rows // 2)
        else:
            area1 = (columns // 2, rows)
            area2 = (columns - columns // 2, rows)

        try:
            page1 = render_page(self.rasterizer, first, profile.with_area(*area1), self.options, backend.kind)
            page2 = None
            if second is not None:
                page2 = render_page(self.rasterizer, second, profile.with_area(*area2), self.options, backend.kind)
        except RenderFailure as e:
            log.warning("%s", e)
            return 0

        layout = CompositeLayout.for_mode(orientation, gap, self.options.dark_mode)
        combined = compose(page1, page2, layout, profile)
        offset = horizontal_offset(columns, combined.char_width, "center")
        return self.emitter.emit(combined, backend.name, offset, "dual")
