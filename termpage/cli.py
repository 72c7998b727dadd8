#!/usr/bin/env python3
# termpage/cli.py
"""
Entry point for termpage.
Loads configuration and shows one page (or two side by side / stacked)
of a document in the terminal.

    termpage FILE [PAGE [PAGE2]]
"""

import os
import sys

from termpage.config import Config
from termpage.document import PdfDocument
from termpage.geometry import detect
from termpage.logging_conf import setup_logging
from termpage.version import version_info
from termpage.viewer import PageViewer, image_rows

USAGE = "usage: termpage FILE [PAGE [PAGE2]]"


def _page_number(arg, page_count):
    try:
        page = int(arg) - 1
    except ValueError:
        print(f"Not a page number: {arg}")
        raise SystemExit(2)
    if not 0 <= page < page_count:
        print(f"Page out of range: 1..{page_count}")
        raise SystemExit(2)
    return page


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    if not args or args[0] in ("-h", "--help"):
        print(f"{version_info()}\n{USAGE}")
        raise SystemExit(0 if args else 2)
    if len(args) > 3:
        print(USAGE)
        raise SystemExit(2)
    if os.name == "nt" and not sys.stdout.isatty():
        print("No Windows console detected. Run from cmd, PowerShell, or Windows Terminal.")
        raise SystemExit(1)

    cfg = Config.load()
    setup_logging(cfg)

    path = args[0]
    if not os.path.exists(path):
        print(f"File not found at: {path}")
        raise SystemExit(1)
    try:
        doc = PdfDocument.open(path)
    except Exception as e:
        # MuPDF raises its own error types for unreadable files.
        print(f"Error opening file: {e}")
        raise SystemExit(1)

    with doc:
        if len(args) > 1:
            page = _page_number(args[1], doc.page_count)
        else:
            pages = doc.content_pages()
            if not pages:
                print("No pages with displayable content found")
                raise SystemExit(1)
            page = pages[0]
        second = _page_number(args[2], doc.page_count) if len(args) > 2 else None

        viewer = PageViewer.from_config(doc, cfg)
        profile = detect()
        rows = profile.rows - 1
        try:
            if second is not None:
                viewer.show_dual(page, second, profile.columns, rows)
            else:
                rows = image_rows(doc.content_type(page), rows)
                viewer.show_or_placeholder(page, profile.columns, rows, cfg["layout"]["align"])
        finally:
            viewer.close()
        print()


if __name__ == "__main__":
    main()
