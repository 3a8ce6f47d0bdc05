"""Viewer configuration package.

``chanplayer.core.config`` exposes the settings manager and its defaults;
implementation is split between the modules of this package.
"""

from __future__ import annotations

from .defaults import DEFAULT_CONFIG, LOG_LEVELS
from .settings import SettingsManager

__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "SettingsManager",
]
