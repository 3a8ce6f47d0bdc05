"""Shortcut registry for viewer commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

def _key(scope: str, action: str) -> str:
    return f"{scope}:{action}"

@dataclass
class ShortcutDescriptor:
    scope: str
    action: str
    label: str
    default: str

    @property
    def registry_key(self) -> str:
        return _key(self.scope, self.action)

_SHORTCUTS: Dict[str, ShortcutDescriptor] = {}


def register_shortcut(scope: str, action: str, *, label: str, default: str) -> None:
    descriptor = ShortcutDescriptor(scope=scope, action=action, label=label, default=default)
    _SHORTCUTS[descriptor.registry_key] = descriptor


def get_shortcut(scope: str, action: str) -> ShortcutDescriptor | None:
    return _SHORTCUTS.get(_key(scope, action))


def iter_shortcuts(scope: str | None = None) -> List[ShortcutDescriptor]:
    return [descriptor for descriptor in _SHORTCUTS.values() if scope is None or descriptor.scope == scope]


def ensure_defaults(default_registry: Dict[str, Dict[str, str]]) -> None:
    for descriptor in _SHORTCUTS.values():
        default_registry.setdefault(descriptor.scope, {})[descriptor.action] = descriptor.default


def _register_defaults() -> None:
    register_shortcut("viewer", "previous", label="Previous item", default="ARROWLEFT")
    register_shortcut("viewer", "next", label="Next item", default="ARROWRIGHT")
    register_shortcut("viewer", "volume_up", label="Volume up", default="ARROWUP")
    register_shortcut("viewer", "volume_down", label="Volume down", default="ARROWDOWN")
    register_shortcut("viewer", "loop_toggle", label="Toggle looping", default="L")
    register_shortcut("viewer", "fullscreen_toggle", label="Toggle fullscreen", default="F")
    register_shortcut("viewer", "layout_toggle", label="Toggle compact layout", default="D")
    register_shortcut("viewer", "rotate_toggle", label="Toggle rotation", default="R")
    register_shortcut("viewer", "play_pause", label="Play/pause video", default="SPACE")
    register_shortcut("viewer", "visibility_toggle", label="Show/hide viewer", default="ESCAPE")
    register_shortcut("viewer", "delete", label="Delete current file", default="DELETE")


_register_defaults()
