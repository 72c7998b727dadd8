#!/usr/bin/env python3
# termpage/staging.py
"""
Staging files for terminal image protocols.

Each emitted bitmap is written as a PNG into a per-session directory and
removed again as soon as the protocol backend is done with it, whether the
draw succeeded or not.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from PIL import Image

from termpage.errors import EncodeFailure

__all__ = ["StagingArea", "staged_png"]

log = logging.getLogger(__name__)


class StagingArea:
    """Directory holding in-flight PNG files. Created lazily."""

    def __init__(self, directory: Optional[str] = None):
        self._dir: Optional[Path] = Path(directory) if directory else None
        self._owned = False

    @property
    def path(self) -> Path:
        if self._dir is None:
            self._dir = Path(tempfile.mkdtemp(prefix="termpage_"))
            self._owned = True
        self._dir.mkdir(parents=True, exist_ok=True)
        return self._dir

    def file_for(self, name: str) -> Path:
        return self.path / f"{name}.png"

    def remove(self, name: str) -> None:
        if self._dir is None:
            return
        try:
            os.remove(self._dir / f"{name}.png")
        except FileNotFoundError:
            pass
        except OSError as e:
            log.warning("could not remove staged image %s: %s", name, e)

    def cleanup(self) -> None:
        """Remove the directory if we created it."""
        if self._owned and self._dir is not None:
            shutil.rmtree(self._dir, ignore_errors=True)
            self._dir = None
            self._owned = False


@contextmanager
def staged_png(
    img: Image.Image,
    area: StagingArea,
    name: str,
    page: Optional[int] = None,
) -> Iterator[Path]:
    """
    Write img to <area>/<name>.png and yield the path.
    The file is deleted on exit. Write errors raise EncodeFailure.
    """
    try:
        path = area.file_for(name)
        img.save(path, "PNG")
    except (OSError, ValueError) as e:
        area.remove(name)
        raise EncodeFailure(page, e) from e
    try:
        yield path
    finally:
        area.remove(name)
