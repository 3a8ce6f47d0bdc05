"""Translate wx key events into viewer key presses."""

from __future__ import annotations

import logging
from typing import List

import wx

from chanplayer.media.types import KeyHandler, KeyPress

logger = logging.getLogger(__name__)

_RAW_CTRL_KEYCODES = tuple(
    key
    for key in (
        getattr(wx, "WXK_RAW_CONTROL", None),
        getattr(wx, "WXK_RAW_CTRL", None),
    )
    if key is not None
)

_NAMED_KEYS = {
    wx.WXK_LEFT: "arrowleft",
    wx.WXK_RIGHT: "arrowright",
    wx.WXK_UP: "arrowup",
    wx.WXK_DOWN: "arrowdown",
    wx.WXK_NUMPAD_LEFT: "arrowleft",
    wx.WXK_NUMPAD_RIGHT: "arrowright",
    wx.WXK_NUMPAD_UP: "arrowup",
    wx.WXK_NUMPAD_DOWN: "arrowdown",
    wx.WXK_ESCAPE: "escape",
    wx.WXK_SPACE: "space",
    wx.WXK_DELETE: "delete",
    wx.WXK_NUMPAD_DELETE: "delete",
}


def key_name(keycode: int) -> str:
    """Return the viewer key name for ``keycode`` or an empty string."""

    named = _NAMED_KEYS.get(keycode)
    if named:
        return named
    if 32 < keycode < 127:
        return chr(keycode).lower()
    return ""


class WxKeySource:
    """Feeds ``EVT_CHAR_HOOK`` presses of a window to subscribed handlers."""

    def __init__(self, window: wx.Window) -> None:
        self._handlers: List[KeyHandler] = []
        window.Bind(wx.EVT_CHAR_HOOK, self._on_char_hook)

    def subscribe(self, handler: KeyHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: KeyHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def _on_char_hook(self, event: wx.KeyEvent) -> None:
        keycode = event.GetKeyCode()
        if keycode in (wx.WXK_SHIFT, wx.WXK_ALT, wx.WXK_CONTROL, *_RAW_CTRL_KEYCODES):
            event.Skip()
            return
        name = key_name(keycode)
        if not name:
            event.Skip()
            return
        press = KeyPress(key=name, ctrl=event.ControlDown(), shift=event.ShiftDown())
        handled = False
        for handler in list(self._handlers):
            handled = handler(press) or handled
        if handled:
            event.StopPropagation()
            return
        event.Skip()
