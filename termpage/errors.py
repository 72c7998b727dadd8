#!/usr/bin/env python3
# termpage/errors.py
"""
Failure types raised by the render pipeline.

Only rasterizing, encoding and writing to the terminal can fail. Geometry,
fitting, compositing and color transforms always resolve to some output.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "TermpageError",
    "RenderFailure",
    "RasterizeFailure",
    "EncodeFailure",
    "EmitFailure",
]


class TermpageError(Exception):
    """Base class for termpage errors."""


class RenderFailure(TermpageError):
    """A single page could not be turned into a displayable bitmap."""

    def __init__(self, page: Optional[int], cause: BaseException):
        self.page = page
        self.cause = cause
        where = "composite" if page is None else f"page {page}"
        super().__init__(f"{self._what} failed for {where}: {cause}")

    _what = "render"


class RasterizeFailure(RenderFailure):
    """The document engine could not produce a bitmap for the page."""

    _what = "rasterize"


class EncodeFailure(RenderFailure):
    """The bitmap could not be written to its staging file."""

    _what = "encode"


class EmitFailure(TermpageError):
    """Writing the image to the terminal failed (broken pipe and the like)."""
