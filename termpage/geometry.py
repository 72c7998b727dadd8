#!/usr/bin/env python3
# termpage/geometry.py
"""
Terminal geometry for termpage.
Detects the terminal family and works out how many pixels one character cell covers.
"""

from __future__ import annotations

import logging
import os
import shutil
import struct
import sys
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Mapping, Optional, Tuple

__all__ = [
    "TerminalFamily",
    "TerminalProfile",
    "TERMINALS",
    "DEFAULT_METRICS",
    "classify_terminal",
    "query_winsize",
    "detect",
]

log = logging.getLogger(__name__)

# Smallest cell size we trust from the pixel query.
MIN_CELL_WIDTH = 4.0
MIN_CELL_HEIGHT = 8.0

FALLBACK_COLUMNS = 80
FALLBACK_ROWS = 24


class TerminalFamily(str, Enum):
    KITTY = "kitty"        # native graphics protocol, sized in cells
    SIXEL = "sixel"        # sixel-capable, sized in pixels
    UNKNOWN = "unknown"


# name -> (family, cell width px, cell height px)
TERMINALS = {
    "kitty":     (TerminalFamily.KITTY, 18.0, 36.0),
    "wezterm":   (TerminalFamily.SIXEL, 18.0, 36.0),
    "iterm2":    (TerminalFamily.SIXEL, 16.0, 32.0),
    "foot":      (TerminalFamily.SIXEL, 15.0, 25.0),
    "alacritty": (TerminalFamily.UNKNOWN, 14.0, 28.0),
    "xterm":     (TerminalFamily.SIXEL, 7.0, 14.0),
}

DEFAULT_METRICS = (TerminalFamily.UNKNOWN, 15.0, 30.0)

_TERM_PROGRAMS = {
    "WezTerm": "wezterm",
    "iTerm.app": "iterm2",
    "Apple_Terminal": "apple_terminal",
}

# Checked in order against $TERM.
_TERM_SUBSTRINGS = ("kitty", "foot", "alacritty", "wezterm", "xterm", "tmux", "screen")


@dataclass(frozen=True)
class TerminalProfile:
    family: TerminalFamily
    name: str
    cell_width: float
    cell_height: float
    columns: int
    rows: int

    def with_area(self, columns: int, rows: int) -> "TerminalProfile":
        """Same terminal, restricted to a sub-area of the screen."""
        return replace(self, columns=int(columns), rows=int(rows))


def classify_terminal(environ: Mapping[str, str]) -> str:
    """Return a terminal name from environment variables, or "unknown"."""
    program = environ.get("TERM_PROGRAM", "")
    if program in _TERM_PROGRAMS:
        return _TERM_PROGRAMS[program]
    if environ.get("KITTY_WINDOW_ID") or environ.get("KITTY_PID"):
        return "kitty"
    term = environ.get("TERM", "")
    for name in _TERM_SUBSTRINGS:
        if name in term:
            return name
    return "unknown"


def query_winsize(fd: Optional[int] = None) -> Tuple[int, int, int, int]:
    """
    Ask the tty for its window size.
    Returns (rows, columns, pixel_width, pixel_height); zeros when unavailable.
    """
    try:
        import fcntl
        import termios
    except ImportError:  # Windows
        return 0, 0, 0, 0
    if fd is None:
        try:
            fd = sys.stdout.fileno()
        except (AttributeError, OSError, ValueError):
            return 0, 0, 0, 0
    try:
        packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
    except OSError:
        return 0, 0, 0, 0
    rows, cols, xpix, ypix = struct.unpack("HHHH", packed)
    return rows, cols, xpix, ypix


def detect(
    environ: Optional[Mapping[str, str]] = None,
    query: Optional[Callable[[], Tuple[int, int, int, int]]] = None,
) -> TerminalProfile:
    """
    Build a TerminalProfile for the current terminal. Never fails.

    Measured pixel metrics win when plausible. Otherwise the per-terminal
    table is used, with 15x30 as the last resort.
    """
    env = os.environ if environ is None else environ
    rows, cols, xpix, ypix = (query or query_winsize)()

    if cols <= 0 or rows <= 0:
        size = shutil.get_terminal_size((FALLBACK_COLUMNS, FALLBACK_ROWS))
        cols, rows = size.columns, size.lines
    if cols <= 0 or rows <= 0:
        cols, rows = FALLBACK_COLUMNS, FALLBACK_ROWS

    name = classify_terminal(env)
    family, cell_w, cell_h = TERMINALS.get(name, DEFAULT_METRICS)

    if xpix > 0 and ypix > 0:
        measured_w = xpix / cols
        measured_h = ypix / rows
        if measured_w > MIN_CELL_WIDTH and measured_h > MIN_CELL_HEIGHT:
            cell_w, cell_h = measured_w, measured_h

    profile = TerminalProfile(family, name, float(cell_w), float(cell_h), int(cols), int(rows))
    log.debug("terminal %s: %dx%d cells of %.1fx%.1f px", name, cols, rows, cell_w, cell_h)
    return profile
