"""Mock rendering backend used by tests and headless runs."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from chanplayer.core.media_kind import MediaKind
from chanplayer.core.playlist import PlaylistItem
from chanplayer.media.types import KeyHandler, KeyPress, MediaNode, Size, SurfaceError, ViewState


logger = logging.getLogger(__name__)


class MockNode:
    """Stand-in for an on-screen media element."""

    def __init__(self, item: PlaylistItem, kind: MediaKind, *, intrinsic: Optional[Size] = None) -> None:
        self.item = item
        self.kind = kind
        self._volume = 1.0
        self._loop = False
        self._paused = True
        self._intrinsic = intrinsic
        self.display_size: Optional[Size] = None
        self.play_result = True
        self.play_calls = 0
        self.destroyed = False
        self._on_finished: Optional[Callable[[], None]] = None
        self._on_ready: Optional[Callable[[], None]] = None

    @property
    def supports_volume(self) -> bool:
        return self.kind is MediaKind.VIDEO

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = value

    @property
    def loop(self) -> bool:
        return self._loop

    @loop.setter
    def loop(self, value: bool) -> None:
        self._loop = value

    def is_paused(self) -> bool:
        return self._paused

    def play(self) -> bool:
        self.play_calls += 1
        if not self.play_result:
            logger.info("[MOCK] Refusing to play %s", self.item.name)
            return False
        self._paused = False
        return True

    def pause(self) -> None:
        self._paused = True

    def intrinsic_size(self) -> Optional[Size]:
        return self._intrinsic

    def set_display_size(self, size: Optional[Size]) -> None:
        self.display_size = size

    def set_finished_callback(self, callback: Optional[Callable[[], None]]) -> None:
        self._on_finished = callback

    def set_ready_callback(self, callback: Optional[Callable[[], None]]) -> None:
        self._on_ready = callback

    def destroy(self) -> None:
        self.destroyed = True
        self._on_finished = None
        self._on_ready = None

    # helpers driving the node from tests
    def finish(self) -> None:
        self._paused = True
        if self._on_finished:
            self._on_finished()

    def load(self, intrinsic: Optional[Size] = None) -> None:
        if intrinsic is not None:
            self._intrinsic = intrinsic
        if self._on_ready:
            self._on_ready()


class MockSurface:
    """Keeps attached nodes in a list instead of drawing them."""

    def __init__(self, viewport: Size = Size(1280, 720), *, allow_fullscreen: bool = True) -> None:
        self.viewport = viewport
        self.allow_fullscreen = allow_fullscreen
        self.children: List[MediaNode] = []
        self.created: List[MockNode] = []
        self.visible = False
        self.fullscreen = False
        self.view_state = ViewState()
        self.default_intrinsic = Size(640, 480)
        self.double_click_handler: Optional[Callable[[], None]] = None

    def create_node(self, item: PlaylistItem, kind: MediaKind) -> MockNode:
        node = MockNode(item, kind, intrinsic=self.default_intrinsic)
        self.created.append(node)
        logger.debug("[MOCK] Created %s node for %s", kind.value, item.name)
        return node

    def attach(self, node: MediaNode) -> None:
        self.children.clear()
        self.children.append(node)

    def detach(self, node: MediaNode) -> None:
        if node in self.children:
            self.children.remove(node)

    def viewport_size(self) -> Size:
        return self.viewport

    def set_visible(self, visible: bool) -> None:
        self.visible = visible

    def set_fullscreen(self, fullscreen: bool) -> bool:
        if not self.allow_fullscreen:
            raise SurfaceError("fullscreen request denied")
        self.fullscreen = fullscreen
        return True

    def apply_view_state(self, state: ViewState) -> None:
        self.view_state = state

    def set_double_click_handler(self, handler: Optional[Callable[[], None]]) -> None:
        self.double_click_handler = handler

    def double_click(self) -> bool:
        """Deliver a double click to the viewport; False when nothing listens."""
        if self.double_click_handler is None:
            return False
        self.double_click_handler()
        return True


class _ManualTimer:
    def __init__(self, due_ms: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by an explicit clock (``advance``)."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._timers: List[_ManualTimer] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self.now_ms + max(0, int(delay_ms)), callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> List[_ManualTimer]:
        return [timer for timer in self._timers if not timer.cancelled]

    def advance(self, delta_ms: int) -> int:
        """Move the clock forward and run due callbacks; returns how many ran."""

        target = self.now_ms + delta_ms
        fired = 0
        while True:
            due = sorted(
                (timer for timer in self._timers if not timer.cancelled and timer.due_ms <= target),
                key=lambda timer: timer.due_ms,
            )
            if not due:
                break
            timer = due[0]
            self._timers.remove(timer)
            self.now_ms = timer.due_ms
            timer.callback()
            fired += 1
        self.now_ms = target
        self._timers = [timer for timer in self._timers if not timer.cancelled]
        return fired


class MockKeySource:
    """Delivers synthetic key presses to subscribed handlers."""

    def __init__(self) -> None:
        self._handlers: List[KeyHandler] = []

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: KeyHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: KeyHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def press(self, key: str, *, ctrl: bool = False, shift: bool = False) -> bool:
        event = KeyPress(key=key, ctrl=ctrl, shift=shift)
        handled = False
        for handler in list(self._handlers):
            handled = handler(event) or handled
        return handled
