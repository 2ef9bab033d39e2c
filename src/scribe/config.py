"""
Lightweight config loading for scribe.
Reads a JSON file in the base path, falling back to defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".scribe_config.json"

DEFAULT_CONFIG = {
    "storage_key": "notes",
    "new_note_title": "New Note",
    "transcriber": {
        "type": "whisper",
        "model": "whisper-1",
    },
}


def load_config(base_path: Path) -> Dict[str, Any]:
    path = Path(base_path) / CONFIG_FILENAME
    if not path.exists():
        return DEFAULT_CONFIG.copy()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("config root must be an object")
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return DEFAULT_CONFIG.copy()
    # Merge shallowly with defaults
    cfg = DEFAULT_CONFIG.copy()
    cfg.update(data)
    return cfg
