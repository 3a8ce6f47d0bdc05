"""Timers on the wx event loop."""

from __future__ import annotations

import logging
from typing import Callable

import wx

logger = logging.getLogger(__name__)


class WxTimerHandle:
    def __init__(self, call: wx.CallLater) -> None:
        self._call = call

    def cancel(self) -> None:
        if self._call.IsRunning():
            self._call.Stop()


class WxScheduler:
    """Runs callbacks on the GUI thread after a delay."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> WxTimerHandle:
        return WxTimerHandle(wx.CallLater(max(1, int(delay_ms)), callback))
