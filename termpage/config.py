#!/usr/bin/env python3
# termpage/config.py
"""
Config loader/saver and defaults for termpage.

Goals:
- Single JSON file per user.
- Safe atomic writes.
- Deep-merge of user config over defaults.
- Basic validation with sane fallbacks.

Usage:
    from termpage.config import Config, RenderOptions
    cfg = Config.load()                 # ~/.config/termpage/termpage.json or OS-specific
    opts = RenderOptions.from_config(cfg)
    cfg["render"]["dark_mode"] = "smart"
    cfg.save()
"""

from __future__ import annotations

import copy
import json
import os
import platform
import shutil
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

# ----------------------------
# Defaults
# ----------------------------

DEFAULT_CONFIG: Dict[str, Any] = {
    "render": {
        "fit_mode": "auto",               # auto | height | width
        "dark_mode": "none",              # none | smart | invert
        "scale": 1.0,                     # user zoom on top of the fitted size
    },
    "layout": {
        "align": "center",                # center | left | right
        "orientation": "stacked",         # stacked | side_by_side (dual page)
        "gap_px": 10,
    },
    "terminal": {
        "protocol": "auto",               # auto | kitty | sixel
    },
    "sixel": {
        "colors": 256,                    # palette size for sixel output
    },
    "staging": {
        "dir": None,                      # auto if None: fresh temp dir per session
    },
    "logging": {
        "level": "WARNING",
        "file": None,                     # path or None
        "rotate_bytes": 5 * 1024 * 1024,
        "rotate_keep": 3,
    },
}

# ----------------------------
# Option enums
# ----------------------------

class FitMode(str, Enum):
    HEIGHT = "height"
    WIDTH = "width"
    AUTO = "auto"


class DarkMode(str, Enum):
    NONE = "none"
    SMART = "smart"
    INVERT = "invert"


class Orientation(str, Enum):
    STACKED = "stacked"
    SIDE_BY_SIDE = "side_by_side"

# ----------------------------
# Helpers
# ----------------------------

def _os_config_home() -> str:
    """Return per-OS config base directory."""
    if platform.system() == "Windows":
        base = os.environ.get("APPDATA") or os.path.expanduser("~\\AppData\\Roaming")
        return os.path.join(base, "Termpage")
    # macOS: ~/Library/Application Support/Termpage
    if platform.system() == "Darwin":
        return os.path.join(os.path.expanduser("~/Library/Application Support"), "Termpage")
    # Linux and others: ~/.config/termpage
    return os.path.join(os.path.expanduser("~/.config"), "termpage")

def _default_config_path() -> str:
    """Resolve default config path, honoring TERMPAGE_CONFIG env override."""
    env = os.environ.get("TERMPAGE_CONFIG")
    if env:
        return os.path.expanduser(env)
    return os.path.join(_os_config_home(), "termpage.json")

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Return deep-merged copy of dicts: values in b override a."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out

def _atomic_write_json(path: str, data: Dict[str, Any]) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp_cfg_", dir=os.path.dirname(path))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
            f.write("\n")
        os.replace(tmp, path)
    except BaseException:
        # Clean temp on error
        try:
            os.remove(tmp)
        except OSError:
            pass
        raise

def _coerce_num(v: Any, default: float, minmax: Optional[Tuple[float, float]] = None) -> float:
    try:
        x = float(v)
    except (TypeError, ValueError):
        return float(default)
    if x != x:  # NaN
        return float(default)
    if minmax:
        lo, hi = minmax
        if x < lo: x = lo
        if x > hi: x = hi
    return x

def _coerce_int(v: Any, default: int, minmax: Optional[Tuple[int, int]] = None) -> int:
    try:
        x = int(v)
    except (TypeError, ValueError):
        return int(default)
    if minmax:
        lo, hi = minmax
        if x < lo: x = lo
        if x > hi: x = hi
    return x

def _coerce_choice(v: Any, choices: Tuple[str, ...], default: str) -> str:
    if isinstance(v, str) and v.strip().lower() in choices:
        return v.strip().lower()
    return default

# ----------------------------
# Validation
# ----------------------------

def _validate(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Return validated copy with fallbacks applied."""
    c = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), cfg or {})
    d = DEFAULT_CONFIG

    # render
    r = c["render"]
    r["fit_mode"] = _coerce_choice(r.get("fit_mode"), tuple(m.value for m in FitMode), d["render"]["fit_mode"])
    r["dark_mode"] = _coerce_choice(r.get("dark_mode"), tuple(m.value for m in DarkMode), d["render"]["dark_mode"])
    r["scale"] = _coerce_num(r.get("scale"), 1.0, (0.1, 10.0))

    # layout
    lo = c["layout"]
    lo["align"] = _coerce_choice(lo.get("align"), ("center", "left", "right"), d["layout"]["align"])
    lo["orientation"] = _coerce_choice(lo.get("orientation"), tuple(o.value for o in Orientation), d["layout"]["orientation"])
    lo["gap_px"] = _coerce_int(lo.get("gap_px"), d["layout"]["gap_px"], (0, 200))

    # terminal
    t = c["terminal"]
    t["protocol"] = _coerce_choice(t.get("protocol"), ("auto", "kitty", "sixel"), d["terminal"]["protocol"])

    # sixel
    c["sixel"]["colors"] = _coerce_int(c["sixel"].get("colors"), d["sixel"]["colors"], (2, 256))

    # staging
    sd = c["staging"].get("dir")
    c["staging"]["dir"] = os.path.expanduser(str(sd)) if sd else None

    # logging
    lg = c["logging"]
    level = str(lg.get("level") or "").upper()
    lg["level"] = level if level in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET") else d["logging"]["level"]
    lf = lg.get("file")
    lg["file"] = str(lf) if lf else None
    lg["rotate_bytes"] = _coerce_int(lg.get("rotate_bytes"), d["logging"]["rotate_bytes"], (256 * 1024, 50 * 1024 * 1024))
    lg["rotate_keep"]  = _coerce_int(lg.get("rotate_keep"), d["logging"]["rotate_keep"], (0, 50))

    return c

# ----------------------------
# Public API
# ----------------------------

@dataclass
class Config:
    """Thin wrapper around a nested dict with load/save/merge."""
    data: Dict[str, Any] = field(default_factory=lambda: _validate({}))
    path: str = field(default_factory=_default_config_path)

    # --- Mapping-style access
    def __getitem__(self, k: str) -> Any:
        return self.data[k]

    def __setitem__(self, k: str, v: Any) -> None:
        self.data[k] = v

    def get(self, k: str, default: Any = None) -> Any:
        return self.data.get(k, default)

    # --- Ops
    @classmethod
    def load(cls, path: Optional[str] = None, create_if_missing: bool = False) -> "Config":
        cfg_path = os.path.expanduser(path) if path else _default_config_path()
        if not os.path.exists(cfg_path):
            cfg = _validate({})
            if create_if_missing:
                _atomic_write_json(cfg_path, cfg)
            return cls(cfg, cfg_path)

        try:
            with open(cfg_path, "r", encoding="utf-8") as f:
                user_cfg = json.load(f)
            if not isinstance(user_cfg, dict):
                raise ValueError("config root must be an object")
        except (OSError, ValueError):
            # Corrupt file. Backup and regenerate.
            backup = cfg_path + ".corrupt.bak"
            try:
                shutil.copyfile(cfg_path, backup)
            except OSError:
                pass
            user_cfg = {}

        return cls(_validate(user_cfg), cfg_path)

    def save(self) -> None:
        """Persist to JSON atomically."""
        full = _validate(self.data)
        _atomic_write_json(self.path, full)
        self.data = full  # sync in-memory with normalized values

    def update(self, partial: Dict[str, Any]) -> None:
        """Deep-merge a partial config then validate."""
        merged = _deep_merge(self.data, partial)
        self.data = _validate(merged)

    # Convenience getters
    @property
    def staging_dir(self) -> Optional[str]:
        return self.data["staging"]["dir"]

    @property
    def protocol(self) -> str:
        return self.data["terminal"]["protocol"]


@dataclass(frozen=True)
class RenderOptions:
    """Per-call render settings. Passed explicitly into planning and rendering."""
    fit_mode: FitMode = FitMode.AUTO
    dark_mode: DarkMode = DarkMode.NONE
    scale: float = 1.0

    @classmethod
    def from_config(cls, cfg: Config) -> "RenderOptions":
        r = cfg["render"]
        return cls(
            fit_mode=FitMode(r["fit_mode"]),
            dark_mode=DarkMode(r["dark_mode"]),
            scale=float(r["scale"]),
        )


__all__ = [
    "Config",
    "DEFAULT_CONFIG",
    "DarkMode",
    "FitMode",
    "Orientation",
    "RenderOptions",
    "_default_config_path",
]
