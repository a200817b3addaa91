"""
App configuration — JSON file merged over in-code defaults.

The file lives at config/settings.json next to the repo root. Missing keys
fall back to DEFAULT_CONFIG; a corrupt file is ignored with a warning.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parent.parent
CONFIG_PATH = ROOT_DIR / "config" / "settings.json"

DEFAULT_CONFIG = {
    "tick_interval_ms": 100,
    "db_path": str(ROOT_DIR / "drawing_trainer.db"),
    "storage_dir": str(ROOT_DIR / "photos"),
    "log_file": "drawing_trainer.log",
    "log_level": "INFO",
}


def load_config(path: Optional[Path] = None) -> dict:
    path = path or CONFIG_PATH
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                cfg = json.load(f)
            # Merge with defaults for any missing keys
            merged = DEFAULT_CONFIG.copy()
            merged.update(cfg)
            return merged
        except (json.JSONDecodeError, AttributeError, TypeError, ValueError):
            logger.warning("Bad config at %s, using defaults.", path)
    return DEFAULT_CONFIG.copy()


def save_config(config: dict, path: Optional[Path] = None) -> None:
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
