"""Default configuration values."""

from __future__ import annotations

from typing import Any, Dict

from chanplayer.core.shortcuts import ensure_defaults

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_CONFIG: Dict[str, Any] = {
    "general": {
        "language": "en",
    },
    "playback": {
        "volume": 0.2,
        "volume_step": 0.1,
        "loop": False,
        "shuffle": True,
        "reshuffle_on_pass_end": False,
        "image_duration_ms": 3000,
        "animated_marker": "@",
        "confirm_delete": True,
    },
    "library": {
        "last_folder": None,
        "recursive": False,
    },
    "diagnostics": {
        "log_level": "WARNING",
    },
    "shortcuts": {
        "viewer": {},
    },
}

ensure_defaults(DEFAULT_CONFIG["shortcuts"])
