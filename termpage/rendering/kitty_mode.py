#!/usr/bin/env python3
# termpage/rendering/kitty_mode.py
"""
Kitty graphics protocol backend.
Transmits the staged PNG in base64 chunks and lets the terminal place it
over a box of character cells. Images are addressed in cells.
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import List

from termpage.fit import ProtocolKind

CHUNK_SIZE = 4096  # max base64 payload per escape


def encode_kitty(png_data: bytes, columns: int, rows: int) -> str:
    """
    Build the APC sequence for a PNG shown over columns x rows cells.

    First chunk carries the control keys: f=100 PNG, a=T transmit and
    display, q=2 suppress replies, c/r the cell box. m=1 means more follows.
    """
    encoded = base64.standard_b64encode(png_data).decode("ascii")
    chunks = [encoded[i:i + CHUNK_SIZE] for i in range(0, len(encoded), CHUNK_SIZE)] or [""]

    parts: List[str] = []
    for i, chunk in enumerate(chunks):
        m = 0 if i == len(chunks) - 1 else 1
        if i == 0:
            parts.append(f"\x1b_Gf=100,a=T,q=2,c={int(columns)},r={int(rows)},m={m};{chunk}\x1b\\")
        else:
            parts.append(f"\x1b_Gm={m};{chunk}\x1b\\")
    return "".join(parts)


class KittyBackend:
    name = "kitty"
    kind = ProtocolKind.CELL

    def draw(self, path: Path, width: int, height: int) -> str:
        """width/height are character cells."""
        return encode_kitty(Path(path).read_bytes(), width, height)
