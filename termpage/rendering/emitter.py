#!/usr/bin/env python3
# termpage/rendering/emitter.py
"""
Protocol dispatcher: hands a rendered bitmap to the active terminal graphics protocol.

- Common API: Emitter.emit(page, backend_name, offset_columns, name) -> lines used
- Backends may register via Emitter.register(name, backend)
- Each backend declares how it is sized: ProtocolKind.CELL backends get the
  page's character extents, ProtocolKind.PIXEL backends get its pixel extents.

The bitmap is staged as a PNG for the duration of the draw only.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from prompt_toolkit.data_structures import Size
from prompt_toolkit.output.vt100 import Vt100_Output

from termpage.errors import EmitFailure, EncodeFailure
from termpage.fit import ProtocolKind
from termpage.geometry import TerminalFamily, TerminalProfile
from termpage.rendering.kitty_mode import KittyBackend
from termpage.rendering.page_renderer import RenderedPage
from termpage.rendering.sixel_mode import SixelBackend
from termpage.staging import StagingArea, staged_png

__all__ = ["ProtocolBackend", "Emitter", "terminal_output"]

log = logging.getLogger(__name__)


class ProtocolBackend:
    """Interface for all graphics protocols."""
    name: str = "base"
    kind: ProtocolKind = ProtocolKind.CELL

    def draw(self, path: Path, width: int, height: int) -> str:
        raise NotImplementedError


def terminal_output(stdout=None) -> Vt100_Output:
    """Vt100 output bound to stdout (or any text stream)."""
    stdout = stdout or sys.stdout
    return Vt100_Output(stdout, lambda: Size(rows=24, columns=80))


@dataclass
class Emitter:
    """
    Protocol strategy holder.
    'kitty' and 'sixel' are always registered.
    """
    output: Vt100_Output = field(default_factory=terminal_output)
    staging: StagingArea = field(default_factory=StagingArea)
    sixel_colors: int = 256

    def __post_init__(self):
        self._backends: Dict[str, ProtocolBackend] = {}
        self.register("kitty", KittyBackend())
        self.register("sixel", SixelBackend(self.sixel_colors))

    def register(self, name: str, backend: ProtocolBackend) -> None:
        self._backends[name] = backend

    def backend(self, name: str) -> ProtocolBackend:
        backend = self._backends.get(name)
        if backend is None:
            # Sixel is the widest-supported fallback
            backend = self._backends["sixel"]
        return backend

    def backend_for(self, profile: TerminalProfile, preference: str = "auto") -> ProtocolBackend:
        """Resolve 'auto' from the terminal family; anything else by name."""
        if preference and preference != "auto":
            return self.backend(preference)
        return self.backend("kitty" if profile.family is TerminalFamily.KITTY else "sixel")

    def emit(
        self,
        page: RenderedPage,
        backend_name: str,
        offset_columns: int = 0,
        name: Optional[str] = None,
    ) -> int:
        """
        Draw page at the cursor, shifted right by offset_columns.
        Returns terminal lines consumed, 0 if anything failed.
        """
        backend = self.backend(backend_name)
        if name is None:
            name = "dual" if page.page is None else f"page_{page.page}"

        if backend.kind is ProtocolKind.CELL:
            width, height = page.char_width, page.char_lines
        else:
            width, height = page.pixel_width, page.pixel_height

        try:
            with staged_png(page.bitmap, self.staging, name, page.page) as path:
                payload = backend.draw(path, width, height)
                self._write(payload, offset_columns)
        except EncodeFailure as e:
            log.warning("%s", e)
            return 0
        except EmitFailure as e:
            log.warning("%s emit failed for %s: %s", backend.name, name, e)
            return 0
        except (OSError, ValueError) as e:
            # Staged file unreadable by the backend.
            log.warning("%s could not draw %s: %s", backend.name, name, e)
            return 0
        return page.char_lines

    def _write(self, payload: str, offset_columns: int) -> None:
        try:
            if offset_columns > 0:
                self.output.cursor_forward(int(offset_columns))
            self.output.write_raw(payload)
            self.output.flush()
        except OSError as e:
            raise EmitFailure(str(e)) from e
