#!/usr/bin/env python3
# termpage/document.py
"""
Document source backed by PyMuPDF.

Opens anything MuPDF reads (PDF, EPUB, ...), rasterizes pages at arbitrary
DPI into RGBA Pillow images, and picks out the pages worth showing.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Union

import fitz  # PyMuPDF
import numpy as np
from PIL import Image

from termpage.errors import RasterizeFailure

__all__ = ["ContentType", "PdfDocument", "bitmap_has_content", "classify_content"]

log = logging.getLogger(__name__)

# Visual content sampling
MIN_CONTENT_SIZE = 50       # pages smaller than this (px) count as blank
SAMPLE_STEP = 10            # sample every Nth pixel on both axes
WHITE_LEVEL = 240           # channel values at or above this are paper
MIN_INK_PIXELS = 20         # sampled non-white pixels needed
MIN_ALPHA = 10              # nearly transparent pixels are skipped

MIN_TEXT_WORDS = 3

# Page classification by meaningful (two or more character) words
TEXT_PAGE_WORDS = 50        # at least this many: text page, even with drawings
MIXED_PAGE_WORDS = 20       # fewer than this plus drawings: mixed page


class ContentType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    MIXED = "mixed"


def bitmap_has_content(img: Image.Image) -> bool:
    """True when the bitmap has enough non-white pixels to be worth displaying."""
    if img.width < MIN_CONTENT_SIZE or img.height < MIN_CONTENT_SIZE:
        return False
    arr = np.asarray(img.convert("RGBA"), dtype=np.uint8)[::SAMPLE_STEP, ::SAMPLE_STEP]
    opaque = arr[..., 3] >= MIN_ALPHA
    ink = (arr[..., :3] < WHITE_LEVEL).any(axis=-1)
    return int(np.count_nonzero(opaque & ink)) >= MIN_INK_PIXELS


def _word_count(text: str) -> int:
    return sum(1 for w in text.split() if len(w) > 1)


def classify_content(text: str, has_visual: bool) -> ContentType:
    """
    Classify a page from its extracted text and whether anything is drawn on it.

    50+ words         -> text
    3..19 words + ink -> mixed
    0..2 words + ink  -> image
    anything else     -> text
    Single characters are not counted as words.
    """
    words = _word_count(text)
    if words >= TEXT_PAGE_WORDS:
        return ContentType.TEXT
    if MIN_TEXT_WORDS <= words < MIXED_PAGE_WORDS and has_visual:
        return ContentType.MIXED
    if words < MIN_TEXT_WORDS and has_visual:
        return ContentType.IMAGE
    return ContentType.TEXT


class PdfDocument:
    """Rasterizer over a MuPDF document."""

    def __init__(self, doc: "fitz.Document", path: str = ""):
        self.doc = doc
        self.path = path

    @classmethod
    def open(cls, path: Union[str, Path]) -> "PdfDocument":
        path = str(Path(path).expanduser())
        return cls(fitz.open(path), path)

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.doc.close()

    @property
    def page_count(self) -> int:
        return self.doc.page_count

    def rasterize(self, page: int, dpi: float) -> Image.Image:
        """Render page at dpi. Raises RasterizeFailure."""
        try:
            zoom = float(dpi) / 72.0
            pix = self.doc.load_page(page).get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
            img = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
        except Exception as e:
            raise RasterizeFailure(page, e) from e
        log.debug("rasterized page %d: %dx%d @ %.1f dpi", page, pix.width, pix.height, dpi)
        return img.convert("RGBA")

    def text(self, page: int) -> str:
        try:
            return self.doc.load_page(page).get_text()
        except Exception as e:
            log.debug("no text for page %d: %s", page, e)
            return ""

    def has_visual_content(self, page: int) -> bool:
        try:
            img = self.rasterize(page, 72.0)
        except RasterizeFailure as e:
            log.debug("%s", e)
            return False
        return bitmap_has_content(img)

    def content_type(self, page: int) -> ContentType:
        text = self.text(page)
        # Long text wins regardless of drawings; skip the render.
        if _word_count(text) >= TEXT_PAGE_WORDS:
            return ContentType.TEXT
        return classify_content(text, self.has_visual_content(page))

    def content_pages(self) -> List[int]:
        """Pages with a few words of text or something drawn on them."""
        pages: List[int] = []
        for i in range(self.page_count):
            if len(self.text(i).split()) >= MIN_TEXT_WORDS or self.has_visual_content(i):
                pages.append(i)
        return pages
