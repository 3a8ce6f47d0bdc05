"""Viewer transport commands and their key bindings."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Mapping, Optional

from chanplayer.core.shortcuts import get_shortcut, iter_shortcuts

logger = logging.getLogger(__name__)


class ViewerCommand(Enum):
    PREVIOUS = "previous"
    NEXT = "next"
    VOLUME_UP = "volume_up"
    VOLUME_DOWN = "volume_down"
    LOOP_TOGGLE = "loop_toggle"
    FULLSCREEN_TOGGLE = "fullscreen_toggle"
    LAYOUT_TOGGLE = "layout_toggle"
    ROTATE_TOGGLE = "rotate_toggle"
    PLAY_PAUSE = "play_pause"
    VISIBILITY_TOGGLE = "visibility_toggle"
    DELETE = "delete"


ALIASES = {
    " ": "space",
    "spacebar": "space",
    "esc": "escape",
    "del": "delete",
    "left": "arrowleft",
    "right": "arrowright",
    "up": "arrowup",
    "down": "arrowdown",
}


def normalize_key(key: str) -> str:
    """Lower-case key name with aliases folded (``" "`` -> ``"space"``)."""

    if key == " ":
        return "space"
    lowered = str(key).strip().lower()
    return ALIASES.get(lowered, lowered)


def default_bindings() -> Dict[str, str]:
    return {descriptor.action: descriptor.default for descriptor in iter_shortcuts("viewer")}


def _label(action: str) -> str:
    descriptor = get_shortcut("viewer", action)
    return descriptor.label if descriptor is not None else action


def build_keymap(bindings: Optional[Mapping[str, str]] = None) -> Dict[str, ViewerCommand]:
    """Map normalized key names to commands.

    ``bindings`` maps action names to key names (settings format). Unknown
    actions and empty keys are skipped. A binding that differs from the
    action's default is applied after the defaults, so a rebound key takes
    over from the default command that held it.
    """

    defaults = default_bindings()
    overrides = {
        action: key
        for action, key in (bindings or {}).items()
        if action not in defaults or normalize_key(key or "") != normalize_key(defaults[action])
    }
    merged = {action: key for action, key in defaults.items() if action not in overrides}
    merged.update(overrides)
    keymap: Dict[str, ViewerCommand] = {}
    for action, key in merged.items():
        try:
            command = ViewerCommand(action)
        except ValueError:
            logger.warning("Unknown viewer action in shortcuts: %s", action)
            continue
        if not key:
            continue
        normalized = normalize_key(key)
        if normalized in keymap and keymap[normalized] is not command:
            logger.warning(
                "Key %s bound to both %s and %s, keeping %s",
                normalized,
                _label(keymap[normalized].value),
                _label(command.value),
                _label(command.value),
            )
        keymap[normalized] = command
    return keymap
