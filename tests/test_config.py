from __future__ import annotations

import json
import os
import tempfile
import unittest
from pathlib import Path

from termpage.config import DEFAULT_CONFIG, Config, DarkMode, FitMode, RenderOptions


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "missing.json"
            cfg = Config.load(str(path))
            self.assertEqual(cfg["render"]["fit_mode"], "auto")
            self.assertEqual(cfg["render"]["dark_mode"], "none")
            self.assertEqual(cfg["render"]["scale"], 1.0)
            self.assertIsNone(cfg.staging_dir)
            self.assertFalse(path.exists())

    def test_create_if_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "sub" / "termpage.json"
            Config.load(str(path), create_if_missing=True)
            self.assertTrue(path.exists())

    def test_save_and_reload(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg = Config.load(str(path))
            cfg["render"]["dark_mode"] = "smart"
            cfg["layout"]["gap_px"] = 24
            cfg.save()
            reloaded = Config.load(str(path))
            self.assertEqual(reloaded["render"]["dark_mode"], "smart")
            self.assertEqual(reloaded["layout"]["gap_px"], 24)
            self.assertEqual(os.listdir(tmp), ["config.json"])

    def test_invalid_values_fall_back(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({
                "render": {"fit_mode": "stretch", "dark_mode": "SMART", "scale": -3},
                "layout": {"gap_px": "wide", "align": "middle"},
                "terminal": {"protocol": "iterm"},
                "sixel": {"colors": 100000},
                "logging": {"level": "chatty"},
            }), encoding="utf-8")
            cfg = Config.load(str(path))
            self.assertEqual(cfg["render"]["fit_mode"], "auto")
            self.assertEqual(cfg["render"]["dark_mode"], "smart")
            self.assertEqual(cfg["render"]["scale"], 0.1)
            self.assertEqual(cfg["layout"]["gap_px"], DEFAULT_CONFIG["layout"]["gap_px"])
            self.assertEqual(cfg["layout"]["align"], "center")
            self.assertEqual(cfg.protocol, "auto")
            self.assertEqual(cfg["sixel"]["colors"], 256)
            self.assertEqual(cfg["logging"]["level"], "WARNING")

    def test_corrupt_file_backed_up(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            cfg = Config.load(str(path))
            self.assertEqual(cfg["render"]["fit_mode"], "auto")
            self.assertTrue(Path(str(path) + ".corrupt.bak").exists())

    def test_env_override(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "env.json"
            path.write_text(json.dumps({"render": {"fit_mode": "width"}}), encoding="utf-8")
            old = os.environ.get("TERMPAGE_CONFIG")
            os.environ["TERMPAGE_CONFIG"] = str(path)
            try:
                cfg = Config.load()
            finally:
                if old is None:
                    del os.environ["TERMPAGE_CONFIG"]
                else:
                    os.environ["TERMPAGE_CONFIG"] = old
            self.assertEqual(cfg.path, str(path))
            self.assertEqual(cfg["render"]["fit_mode"], "width")

    def test_render_options_from_config(self) -> None:
        cfg = Config(path=os.devnull)
        cfg.update({"render": {"fit_mode": "height", "dark_mode": "invert", "scale": 1.5}})
        opts = RenderOptions.from_config(cfg)
        self.assertEqual(opts, RenderOptions(FitMode.HEIGHT, DarkMode.INVERT, 1.5))
        with self.assertRaises(Exception):
            opts.scale = 2.0  # frozen


if __name__ == "__main__":
    unittest.main()
