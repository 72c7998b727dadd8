#!/usr/bin/env python3
# termpage/logging_conf.py
"""
Central logging setup for termpage.
Supports console and optional rotating file logs.
"""

import logging
from logging.handlers import RotatingFileHandler
from termpage.config import Config

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(cfg: Config) -> None:
    level_name = cfg["logging"].get("level", "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    # Console output shares the terminal with the images, so it goes to stderr.
    logging.basicConfig(level=level, format=_FORMAT)

    log_file = cfg["logging"].get("file")
    if log_file:
        handler = RotatingFileHandler(
            log_file,
            maxBytes=int(cfg["logging"].get("rotate_bytes", 5 * 1024 * 1024)),
            backupCount=int(cfg["logging"].get("rotate_keep", 3)),
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(_FORMAT))
        logging.getLogger().addHandler(handler)

    # Pillow logs every PNG chunk at DEBUG.
    logging.getLogger("PIL").setLevel(max(level, logging.INFO))
